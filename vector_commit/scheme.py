"""
Vector Commitment Contract
==========================

``VectorCommitment`` is the interface shared by the KZG and IPA schemes.
A consumer picks a variant at construction time (``create_scheme('kzg')``)
and then only talks to this interface:

    params = scheme.setup(size, ...)
    C = scheme.commit(params, vector)
    opening = scheme.open(params, vector, i)
    scheme.verify(params, C, i, opening.value, opening.proof)

Batches over one vector (``open_batch``) and over several committed vectors
(``open_multi``) share the multiproof of ``multiproof.py``; a batch is the
multi-vector opening with the same commitment repeated.

Parameters returned by ``setup`` are immutable and can be shared freely
between threads. A scheme instance runs ``setup`` at most once.
"""

import logging
import operator
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from .config import config
from .errors import EmptyBatch, IndexOutOfDomain, Rejection, SetupAlreadyDone
from .groups import PairingBackend, setup_group
from . import multiproof
from .polynomial import EvaluationDomain
from .transcript import Transcript

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Accept/reject outcome of a verifier; truthy iff accepted."""

    accepted: bool
    reason: Optional[Rejection] = None

    def __bool__(self):
        return self.accepted

    @classmethod
    def accept(cls) -> 'VerificationResult':
        return cls(True)

    @classmethod
    def reject(cls, reason: Rejection) -> 'VerificationResult':
        return cls(False, reason)


@dataclass(frozen=True)
class Opening:
    """Claimed value at one index together with its proof."""

    value: int
    proof: Any


@dataclass(frozen=True)
class BatchOpening:
    """Claimed values at several indices with one aggregated proof."""

    indices: Tuple[int, ...]
    values: Tuple[int, ...]
    proof: Any


class VectorCommitment(ABC):
    """
    Abstract vector commitment scheme.

    Parameters
    ----------
    backend : PairingBackend, optional
        Field/group/pairing capabilities. Defaults to the curve named by
        ``config.pairing_curve``.
    msm_workers : int, optional
        Threads used for multi-scalar multiplication. Defaults to
        ``config.msm_workers``.
    """

    name = None

    def __init__(self, backend: PairingBackend = None, msm_workers: int = None):
        self.backend = backend or setup_group(config.pairing_curve)
        self.field = self.backend.field
        self.msm_workers = msm_workers or config.msm_workers
        self._params = None

    def __repr__(self):
        return f"{type(self).__name__}({self.backend.group_name!r}, ready={self.is_ready})"

    @property
    def params(self):
        """Parameters produced by ``setup``, or None before setup."""
        return self._params

    @property
    def is_ready(self) -> bool:
        return self._params is not None

    def _ensure_not_setup(self):
        if self._params is not None:
            raise SetupAlreadyDone(f"{type(self).__name__}.setup() was already called")

    def _mark_setup(self, params):
        self._ensure_not_setup()
        self._params = params
        return params

    @abstractmethod
    def setup(self, size: int, *args, **kwargs):
        """Generate the public parameters for vectors of up to ``size`` entries."""

    @abstractmethod
    def commit(self, params, vector: Sequence[int]):
        """Commit to ``vector``."""

    @abstractmethod
    def open(self, params, vector: Sequence[int], index: int) -> Opening:
        """Open the commitment to ``vector`` at ``index``."""

    @abstractmethod
    def open_batch(self, params, vector: Sequence[int], indices: Sequence[int]) -> BatchOpening:
        """Open several indices with one proof."""

    @abstractmethod
    def verify(self, params, commitment, index: int, value: int, proof) -> VerificationResult:
        """Check that ``commitment`` holds ``value`` at ``index``."""

    @abstractmethod
    def verify_batch(self, params, commitment, indices: Sequence[int],
                     values: Sequence[int], proof) -> VerificationResult:
        """Check a batch proof for several indices."""

    @abstractmethod
    def open_multi(self, params, vectors: Sequence[Sequence[int]], indices: Sequence[int],
                   commitments=None) -> BatchOpening:
        """Open ``vectors[j]`` at ``indices[j]`` for every j with one proof."""

    @abstractmethod
    def verify_multi(self, params, commitments, indices: Sequence[int],
                     values: Sequence[int], proof) -> VerificationResult:
        """Check that ``commitments[j]`` holds ``values[j]`` at ``indices[j]`` for every j."""

    def commit_many(self, params, vectors: Sequence[Sequence[int]]) -> List:
        """Commit to independent vectors, in parallel when workers > 1."""
        if self.msm_workers <= 1 or len(vectors) < 2:
            return [self.commit(params, v) for v in vectors]
        with ThreadPoolExecutor(max_workers=self.msm_workers) as pool:
            return list(pool.map(lambda v: self.commit(params, v), vectors))

    def commitment_to_scalar(self, commitment) -> int:
        """
        Map a commitment into the scalar field.

        Lets a commitment be stored as an entry of a parent vector. The
        identity maps to 0; any other point maps to its canonical encoding
        read little-endian and reduced mod p.
        """
        if self.backend.is_identity(commitment):
            return 0
        raw = self.backend.encode_point(commitment)[1:]
        return int.from_bytes(raw, 'little') % self.field.modulus

    @staticmethod
    def _check_index(domain: EvaluationDomain, index) -> int:
        """Return ``index`` as a plain int, or raise IndexOutOfDomain."""
        try:
            index = operator.index(index)
        except TypeError:
            raise IndexOutOfDomain(f"Index {index!r} is not an integer") from None
        if not domain.contains(index):
            raise IndexOutOfDomain(f"Index {index} outside domain of size {domain.size}")
        return index

    @classmethod
    def _check_indices(cls, domain: EvaluationDomain, indices: Sequence) -> List[int]:
        if len(indices) == 0:
            raise EmptyBatch("Batch opening needs at least one index")
        return [cls._check_index(domain, index) for index in indices]

    @staticmethod
    def _check_lengths(indices: Sequence, **others):
        for name, values in others.items():
            if values is not None and len(values) != len(indices):
                raise ValueError(f"{len(values)} {name} for {len(indices)} indices")

    def _prove_queries(self, params, polys, commitments, indices: Sequence[int],
                       protocol: bytes):
        """Multiproof over (commitment, polynomial, index) triples."""
        queries = []
        for commitment, poly, index in zip(commitments, polys, indices):
            point = params.domain.element(index)
            queries.append(multiproof.ProverQuery(commitment, poly, point, poly.evaluate(point)))
        transcript = Transcript(protocol, self.field)
        aggregate, opening = multiproof.prove(self, params, queries, transcript)
        return tuple(q.value for q in queries), aggregate, opening

    def _verify_queries(self, params, commitments, indices: Sequence, values: Sequence[int],
                        aggregate, opening, protocol: bytes) -> VerificationResult:
        indices = self._check_indices(params.domain, indices)
        self._check_lengths(indices, commitments=commitments, values=values)
        queries = [
            multiproof.VerifierQuery(commitment, params.domain.element(index), self.field.reduce(value))
            for commitment, index, value in zip(commitments, indices, values)
        ]
        transcript = Transcript(protocol, self.field)
        return multiproof.verify(self, params, queries, aggregate, opening, transcript)


def create_scheme(name: str, backend: PairingBackend = None, **kwargs) -> VectorCommitment:
    """
    Build a scheme by name.

    Parameters
    ----------
    name : str
        'kzg' or 'ipa' (case-insensitive).
    backend : PairingBackend, optional
        Shared capability backend.
    """
    from .ipa import IPA
    from .kzg import KZG

    schemes = {'kzg': KZG, 'ipa': IPA}
    try:
        cls = schemes[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown vector commitment scheme {name!r}; expected one of {sorted(schemes)}")
    return cls(backend=backend, **kwargs)
