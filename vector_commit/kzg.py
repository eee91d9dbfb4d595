"""
KZG Commitments
===============

Pairing-based polynomial commitments over a structured reference string.

Formulas:
---------
- Commitment:   C = ∏ g_i^{c_i}                        (c = coefficients of p)
- Opening at z: π = ∏ g_i^{q_i},  q(X) = (p(X) - p(z)) / (X - z)
- Verification: e(C · g^{-v}, h) = e(π, h_1 · h^{-z})

Index i of the vector is the domain point z = ω^i, so p(ω^i) = vector[i].

Hiding commitments (opt-in):
----------------------------
With an SRS generated with ``hiding=True`` and an explicit ``Blinding``
(a random polynomial r), the commitment becomes C = ∏ g_i^{c_i} · ∏ k_i^{r_i}.
An opening then carries r(z), the quotient commitment includes the quotient
of r, and the check is

    e(C · g^{-v} · k^{-r(z)}, h) = e(π, h_1 · h^{-z})

Without a ``Blinding`` argument nothing is blinded.

Amortized openings:
-------------------
``open_all`` produces the proofs for every domain point in O(n log n) group
operations (Feist-Khovratovich), using FFTs over the SRS points.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .crs import StructuredReferenceString, keygen_srs
from .errors import ConfigurationError, DegreeOverflow, Rejection
from .polynomial import EvaluationDomain, Polynomial, encode, prepare_vector
from .randomness import GroupRandomSource
from .scheme import BatchOpening, Opening, VectorCommitment, VerificationResult
from .transcript import Transcript
from .utils import msm

logger = logging.getLogger(__name__)

BATCH_PROTOCOL = b"vector_commit/kzg/multiproof"


@dataclass(frozen=True)
class KZGProof:
    """Quotient commitment, plus r(z) when the commitment was blinded."""

    quotient: object
    blinding_eval: Optional[int] = None


@dataclass(frozen=True)
class KZGBatchProof:
    """Commitment D to the aggregated quotient and the opening of m at t."""

    aggregate: object
    opening: object


@dataclass(frozen=True)
class Blinding:
    """Random polynomial hiding a commitment; kept secret by the committer."""

    poly: Polynomial


class KZG(VectorCommitment):
    """
    KZG vector commitment.

    Examples
    --------
    >>> kzg = KZG(setup_group('BN254'))
    >>> srs = kzg.setup(7)
    >>> C = kzg.commit(srs, [3, 1, 4, 1])
    >>> opening = kzg.open(srs, [3, 1, 4, 1], 2)
    >>> bool(kzg.verify(srs, C, 2, opening.value, opening.proof))
    True
    """

    name = 'kzg'

    def setup(self, max_degree: int, secret_source=None,
              hiding: bool = False) -> StructuredReferenceString:
        """
        Run the trusted setup.

        Parameters
        ----------
        max_degree : int
            Largest degree to support (vector length - 1).
        secret_source : object, optional
            Source of τ with ``scalar(modulus)``; defaults to the group CSPRNG.
        hiding : bool, optional
            Also produce the powers needed for blinded commitments.

        Raises
        ------
        SetupTooSmall
            If ``max_degree`` is not positive.
        SetupAlreadyDone
            If this instance already ran setup.
        """
        self._ensure_not_setup()
        if secret_source is None:
            secret_source = GroupRandomSource(self.backend.group)
        srs = keygen_srs(self.backend, max_degree, secret_source, hiding=hiding)
        return self._mark_setup(srs)

    def new_blinding(self, srs: StructuredReferenceString, random_source=None) -> Blinding:
        """Draw a random blinding polynomial of degree < n."""
        self._require_hiding(srs)
        if random_source is None:
            random_source = GroupRandomSource(self.backend.group)
        p = self.field.modulus
        coeffs = [random_source.scalar(p) for _ in range(srs.domain.size)]
        return Blinding(Polynomial(coeffs, self.field))

    @staticmethod
    def _require_hiding(srs: StructuredReferenceString):
        if not srs.hiding:
            raise ConfigurationError("SRS was generated without blinding powers (hiding=False)")

    def _commit_polynomial(self, srs: StructuredReferenceString, poly: Polynomial):
        if poly.degree > srs.max_degree:
            raise DegreeOverflow(f"Degree {poly.degree} exceeds SRS bound {srs.max_degree}")
        coeffs = poly.coeffs[:poly.degree + 1]
        return msm(srs.g1_powers[:len(coeffs)], coeffs, self.backend, self.msm_workers)

    def _commit_blinding(self, srs: StructuredReferenceString, poly: Polynomial):
        coeffs = poly.coeffs[:poly.degree + 1]
        return msm(srs.blinding_powers[:len(coeffs)], coeffs, self.backend, self.msm_workers)

    def commit(self, srs: StructuredReferenceString, vector: Sequence[int],
               blinding: Blinding = None):
        """
        Commit to ``vector``.

        Raises
        ------
        DegreeOverflow
            If the vector is longer than the domain.
        ConfigurationError
            If a blinding is given but the SRS has no blinding powers.
        """
        if blinding is not None:
            self._require_hiding(srs)
        poly = encode(srs.domain, vector)
        commitment = self._commit_polynomial(srs, poly)
        if blinding is not None:
            commitment *= self._commit_blinding(srs, blinding.poly)
        logger.debug("KZG commit to %d entries (blinded=%s)", len(vector), blinding is not None)
        return commitment

    def open(self, srs: StructuredReferenceString, vector: Sequence[int], index: int,
             blinding: Blinding = None) -> Opening:
        """
        Open at ``index``.

        Raises
        ------
        IndexOutOfDomain
            If ``index`` is not in [0, n).
        DegreeOverflow
            If the vector is longer than the domain.
        """
        index = self._check_index(srs.domain, index)
        return self.open_at(srs, vector, srs.domain.element(index), blinding=blinding)

    def open_at(self, srs: StructuredReferenceString, vector: Sequence[int], point: int,
                blinding: Blinding = None) -> Opening:
        """Open at an arbitrary field point, in or out of the domain."""
        poly = encode(srs.domain, vector)
        value, proof = self._prove_point(srs, None, poly, self.field.reduce(point),
                                         blinding=blinding)
        return Opening(value, proof)

    def _prove_point(self, srs, commitment, poly: Polynomial, point: int,
                     transcript: Transcript = None, blinding: Blinding = None):
        if blinding is not None:
            self._require_hiding(srs)
        quotient, value = poly.divide_by_linear(point)
        pi = self._commit_polynomial(srs, quotient)
        blinding_eval = None
        if blinding is not None:
            blinding_quotient, blinding_eval = blinding.poly.divide_by_linear(point)
            pi *= self._commit_blinding(srs, blinding_quotient)
        return value, KZGProof(pi, blinding_eval)

    def verify(self, srs: StructuredReferenceString, commitment, index: int, value: int,
               proof: KZGProof) -> VerificationResult:
        """
        Verify an opening at ``index``.

        Raises
        ------
        IndexOutOfDomain
            If ``index`` is not in [0, n).
        """
        index = self._check_index(srs.domain, index)
        return self.verify_at(srs, commitment, srs.domain.element(index), value, proof)

    def verify_at(self, srs: StructuredReferenceString, commitment, point: int, value: int,
                  proof: KZGProof) -> VerificationResult:
        """Verify an opening at an arbitrary field point."""
        return self._verify_point(srs, commitment, self.field.reduce(point),
                                  self.field.reduce(value), proof)

    def _verify_point(self, srs, commitment, point: int, value: int, proof: KZGProof,
                      transcript: Transcript = None) -> VerificationResult:
        backend = self.backend
        lhs = commitment * backend.neg(backend.mul(srs.g1, value))
        if proof.blinding_eval is not None:
            if not srs.hiding:
                logger.debug("KZG proof carries a blinding value but SRS is not hiding")
                return VerificationResult.reject(Rejection.PAIRING_MISMATCH)
            lhs *= backend.neg(backend.mul(srs.blinding_generator, proof.blinding_eval))

        rhs = srs.g2_tau * backend.neg(backend.mul(srs.g2, point))
        if backend.pairing_eq(lhs, srs.g2, proof.quotient, rhs):
            return VerificationResult.accept()
        logger.debug("KZG verification failed: pairing mismatch")
        return VerificationResult.reject(Rejection.PAIRING_MISMATCH)

    def open_all(self, srs: StructuredReferenceString, vector: Sequence[int]) -> List[Opening]:
        """
        Open every index of the domain at once.

        Parameters
        ----------
        srs : StructuredReferenceString
        vector : sequence of int
            At most n entries; missing entries are zero.

        Returns
        -------
        list of Opening
            ``result[i]`` equals ``open(srs, vector, i)``.

        Notes
        -----
        Amortized proofs of Feist and Khovratovich. The proof at ω^j is
        ∏_k H_k^{ω^{jk}} with H_k = ∏_m g_m^{c_{k+m+1}}, so all n proofs are
        one FFT over G1 of the vector H. H itself is a Toeplitz product of the
        coefficients with the SRS, computed as a cyclic convolution of size
        2n: O(n log n) group operations instead of O(n^2).

        Raises
        ------
        DegreeOverflow
            If the vector is longer than the domain.
        """
        backend = self.backend
        domain = srs.domain
        n = domain.size
        poly = encode(domain, vector)
        wide = EvaluationDomain(2 * n, self.field)

        # H_k = conv[n + k] for conv = c * (g_{n-1}, ..., g_0)
        coeffs_hat = wide.fft(poly.coeffs)
        powers_hat = wide.fft_points(list(reversed(srs.g1_powers)), backend)
        conv = wide.ifft_points([backend.mul(point, c) for point, c in zip(powers_hat, coeffs_hat)],
                                backend)
        proofs = domain.fft_points(conv[n:], backend)

        values = prepare_vector(domain, vector)
        logger.debug("KZG amortized opening of %d indices", n)
        return [Opening(value, KZGProof(pi)) for value, pi in zip(values, proofs)]

    def open_batch(self, srs: StructuredReferenceString, vector: Sequence[int],
                   indices: Sequence[int], commitment=None) -> BatchOpening:
        """
        Open several indices with one constant-size proof.

        Parameters
        ----------
        commitment : G1, optional
            The (unblinded) commitment to ``vector``; recomputed if omitted.

        Raises
        ------
        EmptyBatch
            If ``indices`` is empty.
        IndexOutOfDomain
            If any index is not in [0, n).
        """
        indices = self._check_indices(srs.domain, indices)
        poly = encode(srs.domain, vector)
        if commitment is None:
            commitment = self._commit_polynomial(srs, poly)
        k = len(indices)
        return self._open_queries(srs, [poly] * k, [commitment] * k, indices)

    def open_multi(self, srs: StructuredReferenceString, vectors: Sequence[Sequence[int]],
                   indices: Sequence[int], commitments=None) -> BatchOpening:
        """
        Open ``vectors[j]`` at ``indices[j]`` for every j with one proof.

        The vectors may be distinct committed vectors (verkle-style openings
        along several nodes) or repeat the same one.

        Parameters
        ----------
        commitments : sequence of G1, optional
            Unblinded commitments to ``vectors``; recomputed if omitted.

        Raises
        ------
        EmptyBatch
            If ``indices`` is empty.
        IndexOutOfDomain
            If any index is not in [0, n).
        ValueError
            If ``vectors``, ``indices`` and ``commitments`` differ in length.
        """
        indices = self._check_indices(srs.domain, indices)
        self._check_lengths(indices, vectors=vectors, commitments=commitments)
        polys = [encode(srs.domain, v) for v in vectors]
        if commitments is None:
            commitments = [self._commit_polynomial(srs, f) for f in polys]
        return self._open_queries(srs, polys, commitments, indices)

    def _open_queries(self, srs, polys, commitments, indices) -> BatchOpening:
        values, aggregate, opening = self._prove_queries(srs, polys, commitments, indices,
                                                         BATCH_PROTOCOL)
        return BatchOpening(tuple(indices), values, KZGBatchProof(aggregate, opening.quotient))

    def verify_batch(self, srs: StructuredReferenceString, commitment, indices: Sequence[int],
                     values: Sequence[int], proof: KZGBatchProof) -> VerificationResult:
        """
        Verify a batch opening with a single pairing check.

        Raises
        ------
        EmptyBatch
            If ``indices`` is empty.
        IndexOutOfDomain
            If any index is not in [0, n).
        ValueError
            If ``values`` and ``indices`` differ in length.
        """
        return self.verify_multi(srs, [commitment] * len(indices), indices, values, proof)

    def verify_multi(self, srs: StructuredReferenceString, commitments, indices: Sequence[int],
                     values: Sequence[int], proof: KZGBatchProof) -> VerificationResult:
        """Verify an ``open_multi`` proof with a single pairing check."""
        return self._verify_queries(srs, commitments, indices, values, proof.aggregate,
                                    KZGProof(proof.opening), BATCH_PROTOCOL)
