"""
Multi-point Openings
====================

Opens committed polynomials f_1, ..., f_k at points z_1, ..., z_k with a
proof whose size does not depend on k. The polynomials may belong to
different commitments, and one polynomial may appear in several queries.

Protocol:
---------
1. Absorb every query (C_j, z_j, y_j); derive r.
2. g(X) = ∑_j r^j (f_j(X) - y_j) / (X - z_j), D = commit(g); absorb D, derive t.
3. With w_j = r^j / (t - z_j):
       m(X) = ∑_j w_j f_j(X) - g(X),        y = ∑_j w_j y_j
   Then m(t) = y, and commit(m) = E · D^{-1} with E = ∏_j C_j^{w_j} is
   computable by the verifier alone.
4. Open m at t with the scheme's single-point opening.

If every quotient relation holds, g is a polynomial and the final opening
succeeds; if any y_j is wrong, g(X) has a pole and the random r, t make the
final check fail with overwhelming probability.

The scheme supplies three hooks: ``_commit_polynomial``, ``_prove_point``
and ``_verify_point``.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .polynomial import Polynomial
from .transcript import Transcript
from .utils import msm, powers_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProverQuery:
    """Claim f(point) = value about the polynomial committed to by ``commitment``."""

    commitment: object
    poly: Polynomial
    point: int
    value: int


@dataclass(frozen=True)
class VerifierQuery:
    """The verifier's side of a query: no polynomial."""

    commitment: object
    point: int
    value: int


def _absorb_queries(transcript: Transcript, backend, queries):
    transcript.append_int("k", len(queries))
    for query in queries:
        transcript.append_point("C", query.commitment, backend)
        transcript.append_scalar("z", query.point)
        transcript.append_scalar("y", query.value)


def _weights(field, r: int, t: int, points: Sequence[int]) -> List[int]:
    p = field.modulus
    denominators = [(t - z) % p for z in points]
    if any(d == 0 for d in denominators):
        raise ValueError("Multiproof challenge collided with an opening point")
    inverses = field.batch_inverse(denominators)
    return [rp * inv % p for rp, inv in zip(powers_of(r, len(points), p), inverses)]


def _combined_commitment(scheme, queries, weights, aggregate):
    """E · D^{-1}, the commitment to m."""
    backend = scheme.backend
    combined = msm([q.commitment for q in queries], weights, backend, scheme.msm_workers)
    return combined * backend.neg(aggregate)


def prove(scheme, params, queries: Sequence[ProverQuery],
          transcript: Transcript) -> Tuple[object, object]:
    """
    Produce a multi-point opening.

    Parameters
    ----------
    scheme : VectorCommitment
        Supplies the commitment and single-point opening hooks.
    params : StructuredReferenceString or PublicParameters
    queries : sequence of ProverQuery
        Claims to prove; each value must equal ``poly.evaluate(point)``.
    transcript : Transcript
        Fresh transcript for this session.

    Returns
    -------
    (aggregate, opening)
        The commitment D to g and the scheme's opening of m at t.
    """
    field = scheme.field
    p = field.modulus
    _absorb_queries(transcript, scheme.backend, queries)
    r = transcript.challenge("r")

    g = Polynomial([0], field)
    for rp, query in zip(powers_of(r, len(queries), p), queries):
        quotient, _ = query.poly.divide_by_linear(query.point)
        g = g + quotient.scale(rp)

    aggregate = scheme._commit_polynomial(params, g)
    transcript.append_point("D", aggregate, scheme.backend)
    t = transcript.challenge("t")

    weights = _weights(field, r, t, [q.point for q in queries])
    m = Polynomial([0], field)
    for w, query in zip(weights, queries):
        m = m + query.poly.scale(w)
    m = m - g
    m_commitment = _combined_commitment(scheme, queries, weights, aggregate)

    _, opening = scheme._prove_point(params, m_commitment, m, t, transcript)
    logger.debug("Multiproof over %d queries", len(queries))
    return aggregate, opening


def verify(scheme, params, queries: Sequence[VerifierQuery], aggregate, opening,
           transcript: Transcript):
    """
    Check a multi-point opening.

    Returns
    -------
    VerificationResult
        The result of the inner single-point verification.
    """
    field = scheme.field
    p = field.modulus
    _absorb_queries(transcript, scheme.backend, queries)
    r = transcript.challenge("r")
    transcript.append_point("D", aggregate, scheme.backend)
    t = transcript.challenge("t")

    weights = _weights(field, r, t, [q.point for q in queries])
    y = sum(w * q.value for w, q in zip(weights, queries)) % p
    m_commitment = _combined_commitment(scheme, queries, weights, aggregate)
    return scheme._verify_point(params, m_commitment, t, y, opening, transcript)
