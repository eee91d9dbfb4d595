"""
Test Suite for IPA Vector Commitments
=====================================

Covers single and batch openings, the folding round count, transparency of
the setup and rejection of tampered proofs.
"""

import numpy as np
import pytest

from vector_commit.errors import (
    DegreeOverflow, EmptyBatch, FoldLengthMismatch, IndexOutOfDomain, Rejection, SetupAlreadyDone,
    SetupTooSmall,
)
from vector_commit.ipa import IPA, IPABatchProof, IPAProof
from vector_commit.transcript import Transcript


# ============================================================================
# Concrete scenario: domain of 4
# ============================================================================

def test_four_entries_fold_in_two_rounds(backend):
    ipa = IPA(backend)
    params = ipa.setup(4, b"toy")
    vector = [3, 1, 4, 1]

    C = ipa.commit(params, vector)
    opening = ipa.open(params, vector, 2)

    assert opening.value == 4
    assert opening.proof.num_rounds == 2
    assert len(opening.proof.rounds) == 2
    assert ipa.verify(params, C, 2, 4, opening.proof)
    assert not ipa.verify(params, C, 2, 5, opening.proof)


@pytest.mark.parametrize("size,rounds", [(1, 0), (2, 1), (4, 2), (5, 3), (256, 8)])
def test_fold_rounds(size, rounds):
    assert IPA.fold_rounds(size) == rounds


# ============================================================================
# Correctness and soundness
# ============================================================================

def test_open_every_index(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    for i, expected in enumerate(vector):
        opening = ipa.open(ipa_params, vector, i)
        assert opening.value == expected
        assert opening.proof.num_rounds == 3
        assert ipa.verify(ipa_params, C, i, opening.value, opening.proof)


def test_wrong_value_rejected(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    opening = ipa.open(ipa_params, vector, 6)
    result = ipa.verify(ipa_params, C, 6, opening.value + 1, opening.proof)
    assert not result
    assert result.reason == Rejection.FOLDING_MISMATCH


def test_proof_for_other_index_rejected(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    opening = ipa.open(ipa_params, vector, 3)
    assert not ipa.verify(ipa_params, C, 1, opening.value, opening.proof)


def test_tampered_round_rejected(ipa, ipa_params, vector, backend):
    C = ipa.commit(ipa_params, vector)
    proof = ipa.open(ipa_params, vector, 0).proof
    left, right = proof.rounds[1]
    rounds = list(proof.rounds)
    rounds[1] = (left * backend.g1, right)
    forged = IPAProof(tuple(rounds), proof.a, proof.b)
    assert not ipa.verify(ipa_params, C, 0, vector[0], forged)


def test_tampered_final_scalars_rejected(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    proof = ipa.open(ipa_params, vector, 0).proof
    result = ipa.verify(ipa_params, C, 0, vector[0], IPAProof(proof.rounds, proof.a + 1, proof.b))
    assert not result
    assert result.reason == Rejection.VALUE_MISMATCH
    result = ipa.verify(ipa_params, C, 0, vector[0], IPAProof(proof.rounds, proof.a, proof.b + 1))
    assert not result
    assert result.reason == Rejection.FOLDING_MISMATCH


def test_wrong_round_count_raises(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    proof = ipa.open(ipa_params, vector, 0).proof
    truncated = IPAProof(proof.rounds[:-1], proof.a, proof.b)
    with pytest.raises(FoldLengthMismatch):
        ipa.verify(ipa_params, C, 0, vector[0], truncated)
    padded = IPAProof(proof.rounds + proof.rounds[:1], proof.a, proof.b)
    with pytest.raises(FoldLengthMismatch):
        ipa.verify(ipa_params, C, 0, vector[0], padded)


def test_open_outside_domain(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    z = 987654321
    opening = ipa.open_at(ipa_params, vector, z)
    assert ipa.verify_at(ipa_params, C, z, opening.value, opening.proof)
    assert not ipa.verify_at(ipa_params, C, z, opening.value + 1, opening.proof)


def test_caller_transcript_binds_context(ipa, ipa_params, vector, field):
    C = ipa.commit(ipa_params, vector)
    prover = Transcript(b"app/session-1", field)
    opening = ipa.open(ipa_params, vector, 4, transcript=prover)

    same = Transcript(b"app/session-1", field)
    assert ipa.verify(ipa_params, C, 4, opening.value, opening.proof, transcript=same)
    other = Transcript(b"app/session-2", field)
    assert not ipa.verify(ipa_params, C, 4, opening.value, opening.proof, transcript=other)


# ============================================================================
# Determinism and transparent setup
# ============================================================================

def test_parameters_depend_only_on_seed(backend, vector):
    first, second = IPA(backend), IPA(backend)
    p1 = first.setup(8, "shared-seed")
    p2 = second.setup(8, b"shared-seed")
    assert p1.basis == p2.basis and p1.q == p2.q
    assert first.commit(p1, vector) == second.commit(p2, vector)
    assert first.open(p1, vector, 3).proof == second.open(p2, vector, 3).proof


def test_different_seed_gives_different_basis(backend, ipa_params):
    other = IPA(backend).setup(8, b"another seed")
    assert not other.basis[0] == ipa_params.basis[0]


# ============================================================================
# Batch openings
# ============================================================================

def test_batch_opening_verifies(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    batch = ipa.open_batch(ipa_params, vector, [5, 0, 2])
    assert isinstance(batch.proof, IPABatchProof)
    assert batch.values == (vector[5], vector[0], vector[2])
    assert batch.proof.opening.num_rounds == 3
    assert ipa.verify_batch(ipa_params, C, batch.indices, batch.values, batch.proof)


def test_batch_matches_single_openings(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    indices = [1, 4, 7]
    batch = ipa.open_batch(ipa_params, vector, indices, commitment=C)
    for i, value in zip(indices, batch.values):
        assert ipa.open(ipa_params, vector, i).value == value


def test_batch_wrong_value_rejected(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    batch = ipa.open_batch(ipa_params, vector, [3, 6])
    values = [batch.values[0] + 1, batch.values[1]]
    assert not ipa.verify_batch(ipa_params, C, batch.indices, values, batch.proof)


def test_batch_empty_and_mismatched(ipa, ipa_params, vector):
    with pytest.raises(EmptyBatch):
        ipa.open_batch(ipa_params, vector, [])
    C = ipa.commit(ipa_params, vector)
    batch = ipa.open_batch(ipa_params, vector, [0, 1])
    with pytest.raises(ValueError):
        ipa.verify_batch(ipa_params, C, [0, 1], [batch.values[0]], batch.proof)


# ============================================================================
# Multi-vector openings
# ============================================================================

@pytest.fixture
def vectors():
    return [
        [3, 1, 4, 1, 5, 9, 2, 6],
        [2, 7, 1, 8, 2, 8],
        [1, 4, 1, 4, 2, 1, 3, 5],
    ]


def test_multi_opening_verifies(ipa, ipa_params, vectors):
    commitments = [ipa.commit(ipa_params, v) for v in vectors]
    indices = [5, 1, 7]
    multi = ipa.open_multi(ipa_params, vectors, indices)
    assert multi.values == (9, 7, 5)
    assert multi.proof.opening.num_rounds == 3
    assert ipa.verify_multi(ipa_params, commitments, indices, multi.values, multi.proof)


def test_multi_wrong_value_rejected(ipa, ipa_params, vectors):
    commitments = [ipa.commit(ipa_params, v) for v in vectors]
    indices = [4, 4, 0]
    multi = ipa.open_multi(ipa_params, vectors, indices, commitments=commitments)
    values = [multi.values[0], multi.values[1], multi.values[2] + 1]
    assert not ipa.verify_multi(ipa_params, commitments, indices, values, multi.proof)


def test_multi_swapped_commitments_rejected(ipa, ipa_params, vectors):
    commitments = [ipa.commit(ipa_params, v) for v in vectors]
    indices = [0, 3, 6]
    multi = ipa.open_multi(ipa_params, vectors, indices)
    swapped = [commitments[2], commitments[1], commitments[0]]
    assert not ipa.verify_multi(ipa_params, swapped, indices, multi.values, multi.proof)


def test_batch_is_multi_with_repeated_commitment(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    batch = ipa.open_batch(ipa_params, vector, [2, 7])
    assert batch == ipa.open_multi(ipa_params, [vector, vector], [2, 7])
    assert ipa.verify_multi(ipa_params, [C, C], [2, 7], batch.values, batch.proof)


# ============================================================================
# Domain boundaries and setup
# ============================================================================

def test_index_out_of_domain(ipa, ipa_params, vector):
    with pytest.raises(IndexOutOfDomain):
        ipa.open(ipa_params, vector, 8)
    with pytest.raises(IndexOutOfDomain):
        ipa.open_batch(ipa_params, vector, [0, 8])


def test_numpy_index_accepted(ipa, ipa_params, vector):
    C = ipa.commit(ipa_params, vector)
    opening = ipa.open(ipa_params, vector, np.int64(5))
    assert opening.value == vector[5]
    assert ipa.verify(ipa_params, C, np.int32(5), opening.value, opening.proof)
    with pytest.raises(IndexOutOfDomain):
        ipa.open(ipa_params, vector, 5.0)


def test_vector_longer_than_domain(ipa, ipa_params):
    with pytest.raises(DegreeOverflow):
        ipa.commit(ipa_params, list(range(9)))


def test_setup_state_machine(backend):
    ipa = IPA(backend)
    with pytest.raises(SetupTooSmall):
        ipa.setup(0)
    params = ipa.setup(4)
    assert params.seed == b"vector_commit/ipa"
    with pytest.raises(SetupAlreadyDone):
        ipa.setup(4)
