"""
Vector Commitments
==================

Binding, position-addressable commitments to vectors of field elements,
with two interchangeable schemes behind one interface:

- KZG: pairing-based, constant-size commitments and proofs, trusted setup
- IPA: inner-product argument, logarithmic proofs, no trusted setup

Both are built on charm-crypto pairing groups.

Modules:
--------
- groups: Pairing group initialization and canonical point encoding
- field: Scalar field arithmetic and roots of unity
- polynomial: Evaluation domains, FFT interpolation, quotients
- transcript: Fiat-Shamir transcript
- crs: KZG reference string and IPA parameter generation
- scheme: The VectorCommitment interface and verification results
- kzg / ipa: The two schemes
- multiproof: Constant-size multi-index openings shared by both schemes
- serialization: Byte codecs for commitments and proofs
- randomness: Injected randomness sources

Usage:
------
    from vector_commit import setup_group, create_scheme

    backend = setup_group('BN254')
    kzg = create_scheme('kzg', backend)
    srs = kzg.setup(max_degree=15)

    C = kzg.commit(srs, [3, 1, 4, 1])
    opening = kzg.open(srs, [3, 1, 4, 1], 2)
    assert kzg.verify(srs, C, 2, opening.value, opening.proof)
"""

__version__ = "0.1.0"

from .errors import (
    ConfigurationError, DegreeOverflow, DeserializationError, EmptyBatch,
    FoldLengthMismatch, IndexOutOfDomain, MalformedInputError, Rejection,
    SetupAlreadyDone, SetupTooSmall, UnsupportedDomain, VectorCommitmentError,
)
from .groups import PairingBackend, setup_group
from .polynomial import EvaluationDomain, Polynomial, encode, evaluate
from .transcript import Transcript
from .crs import PublicParameters, StructuredReferenceString
from .scheme import BatchOpening, Opening, VectorCommitment, VerificationResult, create_scheme
from .kzg import KZG, Blinding, KZGBatchProof, KZGProof
from .ipa import IPA, IPABatchProof, IPAProof
from .randomness import FixedSecret, GroupRandomSource, SeededRandomSource

__all__ = [
    'setup_group', 'PairingBackend', 'create_scheme', 'VectorCommitment',
    'KZG', 'IPA', 'KZGProof', 'KZGBatchProof', 'IPAProof', 'IPABatchProof', 'Blinding',
    'StructuredReferenceString', 'PublicParameters', 'EvaluationDomain', 'Polynomial',
    'encode', 'evaluate', 'Transcript', 'Opening', 'BatchOpening', 'VerificationResult',
    'FixedSecret', 'GroupRandomSource', 'SeededRandomSource',
    'VectorCommitmentError', 'ConfigurationError', 'SetupTooSmall', 'UnsupportedDomain',
    'DegreeOverflow', 'IndexOutOfDomain', 'SetupAlreadyDone', 'EmptyBatch',
    'MalformedInputError', 'DeserializationError', 'FoldLengthMismatch', 'Rejection',
]
