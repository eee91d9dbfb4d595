"""
Reference String Generation
===========================

KZG: Structured Reference String
--------------------------------
The SRS consists of powers of a secret τ in both source groups:

- For G1:  g_i := g^{τ^i}      for i ∈ [0, n)
- For G2:  h_i := h^{τ^i}      for i ∈ [0, n)

and, when hiding commitments are requested, k_i := k^{τ^i} in G1 for an
independent generator k. The secret τ is toxic waste: it lives only inside
``keygen_srs`` and is deleted before the SRS is returned. Knowledge of τ
breaks binding.

IPA: Public Parameters
----------------------
The basis G_0, ..., G_{n-1} and the binding element Q are obtained by
hashing ``seed || label || index`` to G1. Nobody knows discrete-log
relations between them, and anyone can re-derive them from the seed.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import SetupTooSmall
from .groups import PairingBackend
from .polynomial import EvaluationDomain
from .utils import powers_of

logger = logging.getLogger(__name__)

BLINDING_GENERATOR_LABEL = b"vector_commit/kzg/blinding"


@dataclass(frozen=True)
class StructuredReferenceString:
    """
    KZG reference string.

    Attributes
    ----------
    domain : EvaluationDomain
        Domain of size n; vectors of up to n entries can be committed.
    g1_powers : tuple of G1
        g^{τ^i} for i in [0, n).
    g2_powers : tuple of G2
        h^{τ^i} for i in [0, n).
    blinding_powers : tuple of G1 or None
        k^{τ^i} for i in [0, n), present only for hiding setups.
    """

    domain: EvaluationDomain
    g1_powers: Tuple
    g2_powers: Tuple
    blinding_powers: Optional[Tuple] = None

    @property
    def size(self) -> int:
        return self.domain.size

    @property
    def max_degree(self) -> int:
        return len(self.g1_powers) - 1

    @property
    def g1(self):
        return self.g1_powers[0]

    @property
    def g2(self):
        return self.g2_powers[0]

    @property
    def g2_tau(self):
        return self.g2_powers[1]

    @property
    def blinding_generator(self):
        return self.blinding_powers[0] if self.blinding_powers else None

    @property
    def hiding(self) -> bool:
        return self.blinding_powers is not None


@dataclass(frozen=True)
class PublicParameters:
    """
    IPA public parameters.

    Attributes
    ----------
    domain : EvaluationDomain
        Domain of size n.
    basis : tuple of G1
        The vector basis G_0, ..., G_{n-1}.
    q : G1
        Element binding the claimed inner-product value.
    seed : bytes
        Public seed the elements were derived from.
    """

    domain: EvaluationDomain
    basis: Tuple
    q: object
    seed: bytes

    @property
    def size(self) -> int:
        return self.domain.size


def keygen_srs(backend: PairingBackend, max_degree: int, secret_source,
               hiding: bool = False) -> StructuredReferenceString:
    """
    Generate a KZG structured reference string.

    Parameters
    ----------
    backend : PairingBackend
        The pairing capabilities.
    max_degree : int
        Largest polynomial degree to support. The domain size is the next
        power of two ≥ max_degree + 1 and the SRS holds that many powers,
        so the effective bound may be larger than requested.
    secret_source : object
        Anything with ``scalar(modulus) -> int``; must be cryptographically
        secure outside tests.
    hiding : bool, optional
        Also generate the blinding powers needed for hiding commitments.

    Raises
    ------
    SetupTooSmall
        If ``max_degree`` is zero or negative.
    """
    if max_degree <= 0:
        raise SetupTooSmall(f"max_degree must be positive, got {max_degree}")

    field = backend.field
    domain = EvaluationDomain(max_degree + 1, field)
    n = domain.size

    tau = secret_source.scalar(field.modulus)
    tau_powers = powers_of(tau, n, field.modulus)
    del tau

    g1_powers = tuple(backend.mul(backend.g1, t) for t in tau_powers)
    g2_powers = tuple(backend.mul(backend.g2, t) for t in tau_powers)
    blinding_powers = None
    if hiding:
        k = backend.hash_to_g1(BLINDING_GENERATOR_LABEL)
        blinding_powers = tuple(backend.mul(k, t) for t in tau_powers)
    del tau_powers

    logger.info("Generated KZG SRS: domain size %d, %d powers, hiding=%s",
                domain.size, n, hiding)
    return StructuredReferenceString(domain, g1_powers, g2_powers, blinding_powers)


def validate_srs(srs: StructuredReferenceString, backend: PairingBackend) -> bool:
    """
    Validate that the SRS is well-formed.

    Checks:
    - g1_powers and g2_powers hold one power per domain point
    - blinding_powers, if present, has the same length
    - the first elements are the canonical generators
    - consecutive powers share the same τ: e(g_{i+1}, h) == e(g_i, h_1)
    - the G2 powers match the G1 powers: e(g_i, h) == e(g, h_i)
    """
    n = len(srs.g1_powers)
    if len(srs.g2_powers) != n or n != srs.domain.size:
        return False
    if srs.blinding_powers is not None and len(srs.blinding_powers) != n:
        return False
    if not (srs.g1 == backend.g1 and srs.g2 == backend.g2):
        return False

    for i in range(n - 1):
        if not backend.pairing_eq(srs.g1_powers[i + 1], srs.g2, srs.g1_powers[i], srs.g2_tau):
            return False
    for i in range(1, n):
        if not backend.pairing_eq(srs.g1_powers[i], srs.g2, srs.g1, srs.g2_powers[i]):
            return False
    if srs.blinding_powers is not None:
        for i in range(n - 1):
            if not backend.pairing_eq(srs.blinding_powers[i + 1], srs.g2,
                                      srs.blinding_powers[i], srs.g2_tau):
                return False
    return True


def derive_public_parameters(backend: PairingBackend, domain_size: int,
                             seed: bytes) -> PublicParameters:
    """
    Derive IPA parameters from a public seed.

    Each basis element is H(seed || "basis" || i) hashed to G1 and Q is
    H(seed || "q"); the derivation is deterministic and needs no secret.

    Raises
    ------
    SetupTooSmall
        If ``domain_size`` is zero or negative.
    """
    domain = EvaluationDomain(domain_size, backend.field)
    seed = bytes(seed)
    basis = tuple(
        backend.hash_to_g1(seed + b"/basis/" + i.to_bytes(8, 'big'))
        for i in range(domain.size)
    )
    q = backend.hash_to_g1(seed + b"/q")
    logger.info("Derived IPA parameters: domain size %d", domain.size)
    return PublicParameters(domain, basis, q, seed)
