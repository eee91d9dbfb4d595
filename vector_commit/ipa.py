"""
Inner Product Argument
======================

Discrete-log vector commitments with logarithmic opening proofs and no
trusted setup.

Commitment (evaluation form):
    C = ∏ G_i^{a_i}                 a_i = vector[i] = f(ω^i)

Opening at z with b = barycentric weights of z (so <a, b> = f(z) = v):

    w  = H(C, z, v),  Q' = Q^w
    repeat log2(n) times:
        L = <a_R, G_L> · Q'^{<a_R, b_L>}
        R = <a_L, G_R> · Q'^{<a_L, b_R>}
        x = H(..., L, R)
        a ← a_L + x a_R,   b ← b_L + x^{-1} b_R,   G ← G_L · G_R^{x^{-1}}

The proof is the sequence of (L, R) pairs plus the final a and b.

Verification replays the challenges and checks

    C · Q'^v · ∏ L_k^{x_k} R_k^{x_k^{-1}} == G_final^a · Q'^{a b}

where G_final = ∏ G_i^{s_i} and b_final = <b, s> use the challenge-product
vector s_i = ∏_k x_k^{-bit_k(i)}, so the basis is folded with a single MSM.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from .config import config
from .crs import PublicParameters, derive_public_parameters
from .errors import FoldLengthMismatch, Rejection
from .polynomial import Polynomial, prepare_vector
from .scheme import BatchOpening, Opening, VectorCommitment, VerificationResult
from .transcript import Transcript
from .utils import fold_points, fold_scalars, inner_product, msm, split

logger = logging.getLogger(__name__)

OPEN_PROTOCOL = b"vector_commit/ipa/open"
BATCH_PROTOCOL = b"vector_commit/ipa/multiproof"


@dataclass(frozen=True)
class IPAProof:
    """Folding rounds (L, R) and the final folded scalars a and b."""

    rounds: Tuple[Tuple[object, object], ...]
    a: int
    b: int

    @property
    def num_rounds(self) -> int:
        return len(self.rounds)


@dataclass(frozen=True)
class IPABatchProof:
    """Commitment D to the aggregated quotient and the IPA opening of m at t."""

    aggregate: object
    opening: IPAProof


class IPA(VectorCommitment):
    """
    IPA vector commitment.

    Examples
    --------
    >>> ipa = IPA(setup_group('BN254'))
    >>> params = ipa.setup(4, b"my-seed")
    >>> opening = ipa.open(params, [3, 1, 4, 1], 2)
    >>> opening.proof.num_rounds
    2
    """

    name = 'ipa'

    @staticmethod
    def fold_rounds(size: int) -> int:
        """Number of folding rounds for a domain of ``size`` points."""
        return max(size - 1, 0).bit_length()

    def setup(self, domain_size: int, public_seed=None) -> PublicParameters:
        """
        Derive the public parameters.

        Parameters
        ----------
        domain_size : int
            Maximum vector length; rounded up to a power of two.
        public_seed : bytes or str, optional
            Seed for the basis; defaults to ``config.ipa_seed``.

        Raises
        ------
        SetupTooSmall
            If ``domain_size`` is not positive.
        SetupAlreadyDone
            If this instance already ran setup.
        """
        self._ensure_not_setup()
        if public_seed is None:
            public_seed = config.ipa_seed_bytes
        elif isinstance(public_seed, str):
            public_seed = public_seed.encode('utf-8')
        params = derive_public_parameters(self.backend, domain_size, public_seed)
        return self._mark_setup(params)

    def _msm(self, bases, exponents):
        return msm(bases, exponents, self.backend, self.msm_workers)

    def commit(self, params: PublicParameters, vector: Sequence[int]):
        """
        Commit to ``vector``.

        Raises
        ------
        DegreeOverflow
            If the vector is longer than the domain.
        """
        evals = prepare_vector(params.domain, vector)
        logger.debug("IPA commit to %d entries", len(vector))
        return self._msm(params.basis, evals)

    def _commit_polynomial(self, params: PublicParameters, poly: Polynomial):
        return self._msm(params.basis, poly.evaluations(params.domain))

    def open(self, params: PublicParameters, vector: Sequence[int], index: int,
             transcript: Transcript = None) -> Opening:
        """
        Open at ``index``.

        Raises
        ------
        IndexOutOfDomain
            If ``index`` is not in [0, n).
        DegreeOverflow
            If the vector is longer than the domain.
        """
        index = self._check_index(params.domain, index)
        return self.open_at(params, vector, params.domain.element(index), transcript)

    def open_at(self, params: PublicParameters, vector: Sequence[int], point: int,
                transcript: Transcript = None) -> Opening:
        """Open at an arbitrary field point, in or out of the domain."""
        evals = prepare_vector(params.domain, vector)
        commitment = self._msm(params.basis, evals)
        if transcript is None:
            transcript = Transcript(OPEN_PROTOCOL, self.field)
        value, proof = self._prove_evaluations(params, commitment, evals,
                                               self.field.reduce(point), transcript)
        return Opening(value, proof)

    def _prove_point(self, params, commitment, poly: Polynomial, point: int,
                     transcript: Transcript):
        evals = poly.evaluations(params.domain)
        return self._prove_evaluations(params, commitment, evals, point, transcript)

    def _prove_evaluations(self, params: PublicParameters, commitment, evals, point: int,
                           transcript: Transcript):
        field = self.field
        p = field.modulus
        backend = self.backend

        b = params.domain.barycentric_coefficients(point)
        value = inner_product(evals, b, p)

        transcript.append_point("C", commitment, backend)
        transcript.append_scalar("z", point)
        transcript.append_scalar("y", value)
        w = transcript.challenge("w")
        q = backend.mul(params.q, w)

        a = list(evals)
        basis = list(params.basis)
        rounds = []
        while len(a) > 1:
            a_l, a_r = split(a)
            b_l, b_r = split(b)
            g_l, g_r = split(basis)

            z_l = inner_product(a_r, b_l, p)
            z_r = inner_product(a_l, b_r, p)
            left = self._msm(g_l + [q], a_r + [z_l])
            right = self._msm(g_r + [q], a_l + [z_r])

            transcript.append_point("L", left, backend)
            transcript.append_point("R", right, backend)
            x = transcript.challenge("x")
            x_inv = field.inv(x)

            a = fold_scalars(a_l, a_r, x, p)
            b = fold_scalars(b_l, b_r, x_inv, p)
            basis = fold_points(g_l, g_r, x_inv, backend)
            rounds.append((left, right))

        logger.debug("IPA opening with %d folding rounds", len(rounds))
        return value, IPAProof(tuple(rounds), a[0], b[0])

    def verify(self, params: PublicParameters, commitment, index: int, value: int,
               proof: IPAProof, transcript: Transcript = None) -> VerificationResult:
        """
        Verify an opening at ``index``.

        Raises
        ------
        IndexOutOfDomain
            If ``index`` is not in [0, n).
        FoldLengthMismatch
            If the proof has the wrong number of rounds.
        """
        index = self._check_index(params.domain, index)
        return self.verify_at(params, commitment, params.domain.element(index), value,
                              proof, transcript)

    def verify_at(self, params: PublicParameters, commitment, point: int, value: int,
                  proof: IPAProof, transcript: Transcript = None) -> VerificationResult:
        """Verify an opening at an arbitrary field point."""
        if transcript is None:
            transcript = Transcript(OPEN_PROTOCOL, self.field)
        return self._verify_point(params, commitment, self.field.reduce(point),
                                  self.field.reduce(value), proof, transcript)

    def _verify_point(self, params: PublicParameters, commitment, point: int, value: int,
                      proof: IPAProof, transcript: Transcript) -> VerificationResult:
        field = self.field
        p = field.modulus
        backend = self.backend

        expected_rounds = params.domain.log_size
        if len(proof.rounds) != expected_rounds:
            raise FoldLengthMismatch(
                f"Proof has {len(proof.rounds)} rounds, domain needs {expected_rounds}")

        transcript.append_point("C", commitment, backend)
        transcript.append_scalar("z", point)
        transcript.append_scalar("y", value)
        w = transcript.challenge("w")
        q = backend.mul(params.q, w)

        challenges = []
        for left, right in proof.rounds:
            transcript.append_point("L", left, backend)
            transcript.append_point("R", right, backend)
            challenges.append(transcript.challenge("x"))
        inverses = field.batch_inverse(challenges)

        # s_i = ∏ x_k^{-1} over the rounds k whose split put i in the upper half
        s = [1]
        for x_inv in reversed(inverses):
            s = s + [v * x_inv % p for v in s]

        b = params.domain.barycentric_coefficients(point)
        b_final = inner_product(b, s, p)
        a_final = proof.a % p
        if b_final != proof.b % p:
            logger.debug("IPA verification failed: folded evaluation weight mismatch")
            return VerificationResult.reject(Rejection.FOLDING_MISMATCH)

        points = [q]
        exponents = [value]
        for (left, right), x, x_inv in zip(proof.rounds, challenges, inverses):
            points += [left, right]
            exponents += [x, x_inv]
        folded_commitment = commitment * self._msm(points, exponents)

        g_final = self._msm(params.basis, s)
        expected = self._msm([g_final, q], [a_final, a_final * b_final % p])
        if folded_commitment == expected:
            return VerificationResult.accept()
        logger.debug("IPA verification failed: folded commitment does not open to the claimed value")
        return VerificationResult.reject(Rejection.VALUE_MISMATCH)

    def open_batch(self, params: PublicParameters, vector: Sequence[int],
                   indices: Sequence[int], commitment=None) -> BatchOpening:
        """
        Open several indices with one aggregated commitment and one IPA proof.

        Raises
        ------
        EmptyBatch
            If ``indices`` is empty.
        IndexOutOfDomain
            If any index is not in [0, n).
        """
        indices = self._check_indices(params.domain, indices)
        poly, commitment = self._encode(params, vector, commitment)
        k = len(indices)
        return self._open_queries(params, [poly] * k, [commitment] * k, indices)

    def open_multi(self, params: PublicParameters, vectors: Sequence[Sequence[int]],
                   indices: Sequence[int], commitments=None) -> BatchOpening:
        """
        Open ``vectors[j]`` at ``indices[j]`` for every j with one aggregated
        commitment and one IPA proof.

        Raises
        ------
        EmptyBatch
            If ``indices`` is empty.
        IndexOutOfDomain
            If any index is not in [0, n).
        ValueError
            If ``vectors``, ``indices`` and ``commitments`` differ in length.
        """
        indices = self._check_indices(params.domain, indices)
        self._check_lengths(indices, vectors=vectors, commitments=commitments)
        if commitments is None:
            commitments = [None] * len(vectors)
        polys, commitments = zip(*(self._encode(params, v, c) for v, c in zip(vectors, commitments)))
        return self._open_queries(params, polys, commitments, indices)

    def _encode(self, params: PublicParameters, vector, commitment=None):
        evals = prepare_vector(params.domain, vector)
        if commitment is None:
            commitment = self._msm(params.basis, evals)
        return Polynomial(params.domain.ifft(evals), self.field), commitment

    def _open_queries(self, params, polys, commitments, indices) -> BatchOpening:
        values, aggregate, opening = self._prove_queries(params, polys, commitments, indices,
                                                         BATCH_PROTOCOL)
        return BatchOpening(tuple(indices), values, IPABatchProof(aggregate, opening))

    def verify_batch(self, params: PublicParameters, commitment, indices: Sequence[int],
                     values: Sequence[int], proof: IPABatchProof) -> VerificationResult:
        """
        Verify a batch opening.

        Raises
        ------
        EmptyBatch
            If ``indices`` is empty.
        IndexOutOfDomain
            If any index is not in [0, n).
        FoldLengthMismatch
            If the inner proof has the wrong number of rounds.
        ValueError
            If ``values`` and ``indices`` differ in length.
        """
        return self.verify_multi(params, [commitment] * len(indices), indices, values, proof)

    def verify_multi(self, params: PublicParameters, commitments, indices: Sequence[int],
                     values: Sequence[int], proof: IPABatchProof) -> VerificationResult:
        """Verify an ``open_multi`` proof."""
        return self._verify_queries(params, commitments, indices, values, proof.aggregate,
                                    proof.opening, BATCH_PROTOCOL)
