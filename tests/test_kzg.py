"""
Test Suite for KZG Vector Commitments
=====================================

Positive cases check that honest openings verify; negative cases tamper with
values, indices, proofs or commitments and expect rejection.
"""

import dataclasses

import numpy as np
import pytest

from vector_commit.crs import validate_srs
from vector_commit.errors import (
    ConfigurationError, DegreeOverflow, EmptyBatch, IndexOutOfDomain, Rejection,
    SetupAlreadyDone, SetupTooSmall,
)
from vector_commit.kzg import KZG, Blinding, KZGProof
from vector_commit.polynomial import Polynomial
from vector_commit.randomness import FixedSecret, SeededRandomSource


# ============================================================================
# Concrete scenario: domain of 4, τ = 5
# ============================================================================

def test_toy_setup_opens_index_two(backend):
    kzg = KZG(backend)
    srs = kzg.setup(3, FixedSecret(5))
    assert srs.domain.size == 4

    vector = [3, 1, 4, 1]
    C = kzg.commit(srs, vector)
    opening = kzg.open(srs, vector, 2)

    assert opening.value == 4
    assert kzg.verify(srs, C, 2, 4, opening.proof)

    result = kzg.verify(srs, C, 2, 5, opening.proof)
    assert not result
    assert result.reason == Rejection.PAIRING_MISMATCH


def test_toy_srs_holds_powers_of_tau(backend):
    srs = KZG(backend).setup(3, FixedSecret(5))
    for i, power in enumerate(srs.g1_powers):
        assert power == backend.mul(backend.g1, 5 ** i)
    assert srs.g2_tau == backend.mul(backend.g2, 5)


# ============================================================================
# Correctness and soundness
# ============================================================================

def test_open_every_index(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    for i, expected in enumerate(vector):
        opening = kzg.open(srs, vector, i)
        assert opening.value == expected
        assert kzg.verify(srs, C, i, opening.value, opening.proof)


def test_short_vector_is_zero_padded(kzg, srs):
    vector = [10, 20, 30]
    C = kzg.commit(srs, vector)
    opening = kzg.open(srs, vector, 6)
    assert opening.value == 0
    assert kzg.verify(srs, C, 6, 0, opening.proof)


def test_wrong_value_rejected(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    opening = kzg.open(srs, vector, 3)
    assert not kzg.verify(srs, C, 3, opening.value + 1, opening.proof)


def test_proof_for_other_index_rejected(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    opening = kzg.open(srs, vector, 3)
    # vector[1] == vector[3] == 1, so only the index differs
    assert not kzg.verify(srs, C, 1, opening.value, opening.proof)


def test_tampered_proof_rejected(kzg, srs, vector, backend):
    C = kzg.commit(srs, vector)
    opening = kzg.open(srs, vector, 4)
    forged = KZGProof(opening.proof.quotient * backend.g1)
    assert not kzg.verify(srs, C, 4, opening.value, forged)


def test_other_commitment_rejected(kzg, srs, vector):
    other = list(vector)
    other[0] += 1
    C_other = kzg.commit(srs, other)
    opening = kzg.open(srs, vector, 5)
    assert not kzg.verify(srs, C_other, 5, opening.value, opening.proof)


def test_open_outside_domain(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    z = 123456789
    opening = kzg.open_at(srs, vector, z)
    assert kzg.verify_at(srs, C, z, opening.value, opening.proof)
    assert not kzg.verify_at(srs, C, z, opening.value + 1, opening.proof)


# ============================================================================
# Determinism
# ============================================================================

def test_commit_and_open_are_deterministic(backend, vector):
    first, second = KZG(backend), KZG(backend)
    srs1 = first.setup(7, SeededRandomSource(42))
    srs2 = second.setup(7, SeededRandomSource(42))
    assert first.commit(srs1, vector) == second.commit(srs2, vector)
    assert first.open(srs1, vector, 2).proof == second.open(srs2, vector, 2).proof


# ============================================================================
# Batch openings
# ============================================================================

def test_batch_opening_verifies(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    batch = kzg.open_batch(srs, vector, [6, 1, 3])
    assert batch.indices == (6, 1, 3)
    assert batch.values == (vector[6], vector[1], vector[3])
    assert kzg.verify_batch(srs, C, batch.indices, batch.values, batch.proof)


def test_batch_matches_single_openings(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    indices = [0, 2, 5, 7]
    batch = kzg.open_batch(srs, vector, indices, commitment=C)
    for i, value in zip(indices, batch.values):
        single = kzg.open(srs, vector, i)
        assert single.value == value
        assert kzg.verify(srs, C, i, value, single.proof)


def test_batch_wrong_value_rejected(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    batch = kzg.open_batch(srs, vector, [0, 4])
    values = [batch.values[0], batch.values[1] + 1]
    assert not kzg.verify_batch(srs, C, batch.indices, values, batch.proof)


def test_batch_wrong_indices_rejected(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    batch = kzg.open_batch(srs, vector, [1, 2])
    # vector[3] == vector[1]
    assert not kzg.verify_batch(srs, C, [3, 2], batch.values, batch.proof)


def test_single_index_batch(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    batch = kzg.open_batch(srs, vector, [7])
    assert kzg.verify_batch(srs, C, [7], batch.values, batch.proof)


# ============================================================================
# Domain boundaries and configuration errors
# ============================================================================

@pytest.mark.parametrize("index", [-1, 8, 100])
def test_index_out_of_domain(kzg, srs, vector, index):
    C = kzg.commit(srs, vector)
    with pytest.raises(IndexOutOfDomain):
        kzg.open(srs, vector, index)
    with pytest.raises(IndexOutOfDomain):
        kzg.verify(srs, C, index, 0, kzg.open(srs, vector, 0).proof)


def test_vector_longer_than_domain(kzg, srs):
    with pytest.raises(DegreeOverflow):
        kzg.commit(srs, list(range(9)))
    with pytest.raises(DegreeOverflow):
        kzg.open(srs, list(range(9)), 0)


def test_empty_batch(kzg, srs, vector):
    with pytest.raises(EmptyBatch):
        kzg.open_batch(srs, vector, [])


def test_batch_value_count_mismatch(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    batch = kzg.open_batch(srs, vector, [0, 1])
    with pytest.raises(ValueError):
        kzg.verify_batch(srs, C, [0, 1], batch.values[:1], batch.proof)


def test_setup_state_machine(backend):
    kzg = KZG(backend)
    assert not kzg.is_ready and kzg.params is None
    with pytest.raises(SetupTooSmall):
        kzg.setup(0, FixedSecret(5))
    srs = kzg.setup(3, FixedSecret(5))
    assert kzg.is_ready and kzg.params is srs
    with pytest.raises(SetupAlreadyDone):
        kzg.setup(3, FixedSecret(5))


def test_validate_srs(backend, srs):
    assert validate_srs(srs, backend)
    powers = list(srs.g1_powers)
    powers[2] = powers[2] * backend.g1
    assert not validate_srs(dataclasses.replace(srs, g1_powers=tuple(powers)), backend)


# ============================================================================
# Hiding commitments
# ============================================================================

@pytest.fixture(scope="module")
def hiding(backend):
    kzg = KZG(backend)
    srs = kzg.setup(7, SeededRandomSource(7), hiding=True)
    return kzg, srs


def test_blinded_commitment_opens(hiding, vector):
    kzg, srs = hiding
    blinding = kzg.new_blinding(srs, SeededRandomSource(8))
    C = kzg.commit(srs, vector, blinding=blinding)
    assert not C == kzg.commit(srs, vector)

    opening = kzg.open(srs, vector, 5, blinding=blinding)
    assert opening.value == vector[5]
    assert opening.proof.blinding_eval is not None
    assert kzg.verify(srs, C, 5, opening.value, opening.proof)
    assert not kzg.verify(srs, C, 5, opening.value + 1, opening.proof)


def test_blinded_commitment_needs_blinding_value(hiding, vector):
    kzg, srs = hiding
    blinding = kzg.new_blinding(srs, SeededRandomSource(9))
    C = kzg.commit(srs, vector, blinding=blinding)
    opening = kzg.open(srs, vector, 1, blinding=blinding)
    stripped = KZGProof(opening.proof.quotient)
    assert not kzg.verify(srs, C, 1, opening.value, stripped)


def test_blinding_requires_hiding_srs(kzg, srs):
    with pytest.raises(ConfigurationError):
        kzg.new_blinding(srs)


def test_blinding_checked_before_any_msm(kzg, srs, vector, field, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("msm ran before the hiding check")

    monkeypatch.setattr("vector_commit.kzg.msm", fail)
    blinding = Blinding(Polynomial([1, 2], field))
    with pytest.raises(ConfigurationError):
        kzg.commit(srs, vector, blinding=blinding)
    with pytest.raises(ConfigurationError):
        kzg.open(srs, vector, 2, blinding=blinding)


# ============================================================================
# Index types
# ============================================================================

def test_numpy_indices_accepted(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    index = np.int64(3)
    opening = kzg.open(srs, vector, index)
    assert opening == kzg.open(srs, vector, 3)
    assert kzg.verify(srs, C, index, opening.value, opening.proof)

    batch = kzg.open_batch(srs, vector, np.array([1, 6]))
    assert batch.indices == (1, 6)
    assert all(type(i) is int for i in batch.indices)
    assert kzg.verify_batch(srs, C, np.array([1, 6]), batch.values, batch.proof)


@pytest.mark.parametrize("index", [1.5, "1", None])
def test_non_integer_index_rejected(kzg, srs, vector, index):
    with pytest.raises(IndexOutOfDomain):
        kzg.open(srs, vector, index)
    with pytest.raises(IndexOutOfDomain):
        kzg.open_batch(srs, vector, [0, index])


# ============================================================================
# Amortized openings
# ============================================================================

def test_open_all_matches_single_openings(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    openings = kzg.open_all(srs, vector)
    assert len(openings) == srs.domain.size
    for i, opening in enumerate(openings):
        assert opening == kzg.open(srs, vector, i)
        assert kzg.verify(srs, C, i, opening.value, opening.proof)


def test_open_all_short_vector(kzg, srs):
    vector = [7, 0, 11]
    C = kzg.commit(srs, vector)
    openings = kzg.open_all(srs, vector)
    assert [o.value for o in openings] == [7, 0, 11, 0, 0, 0, 0, 0]
    for i, opening in enumerate(openings):
        assert opening == kzg.open(srs, vector, i)
        assert kzg.verify(srs, C, i, opening.value, opening.proof)


def test_open_all_toy_domain(backend):
    kzg = KZG(backend)
    srs = kzg.setup(3, FixedSecret(5))
    vector = [3, 1, 4, 1]
    openings = kzg.open_all(srs, vector)
    assert [kzg.open(srs, vector, i) for i in range(4)] == openings
    assert not kzg.verify(srs, kzg.commit(srs, vector), 0, 3, openings[1].proof)


def test_open_all_rejects_long_vector(kzg, srs):
    with pytest.raises(DegreeOverflow):
        kzg.open_all(srs, list(range(9)))


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


def test_multi_opening_verifies(kzg, srs, vectors):
    commitments = [kzg.commit(srs, v) for v in vectors]
    indices = [5, 1, 7]
    multi = kzg.open_multi(srs, vectors, indices)
    assert multi.values == (9, 7, 5)
    assert kzg.verify_multi(srs, commitments, indices, multi.values, multi.proof)


def test_multi_opening_repeats_vectors(kzg, srs, vectors):
    commitments = [kzg.commit(srs, v) for v in vectors]
    order = [0, 2, 1, 0, 2]
    indices = [0, 0, 3, 6, 7]
    multi = kzg.open_multi(srs, [vectors[j] for j in order], indices,
                           commitments=[commitments[j] for j in order])
    assert multi.values == (3, 1, 8, 2, 5)
    assert kzg.verify_multi(srs, [commitments[j] for j in order], indices, multi.values,
                            multi.proof)


def test_multi_wrong_value_rejected(kzg, srs, vectors):
    commitments = [kzg.commit(srs, v) for v in vectors]
    indices = [2, 2, 2]
    multi = kzg.open_multi(srs, vectors, indices)
    values = list(multi.values)
    values[1] += 1
    result = kzg.verify_multi(srs, commitments, indices, values, multi.proof)
    assert not result
    assert result.reason == Rejection.PAIRING_MISMATCH


def test_multi_swapped_commitments_rejected(kzg, srs, vectors):
    commitments = [kzg.commit(srs, v) for v in vectors]
    indices = [0, 3, 4]
    multi = kzg.open_multi(srs, vectors, indices)
    swapped = [commitments[1], commitments[0], commitments[2]]
    assert not kzg.verify_multi(srs, swapped, indices, multi.values, multi.proof)


def test_batch_is_multi_with_repeated_commitment(kzg, srs, vector):
    C = kzg.commit(srs, vector)
    indices = [6, 1, 3]
    batch = kzg.open_batch(srs, vector, indices)
    multi = kzg.open_multi(srs, [vector] * 3, indices)
    assert batch == multi
    assert kzg.verify_multi(srs, [C] * 3, indices, batch.values, batch.proof)


def test_multi_length_mismatch(kzg, srs, vectors):
    with pytest.raises(ValueError):
        kzg.open_multi(srs, vectors, [0, 1])
    with pytest.raises(EmptyBatch):
        kzg.open_multi(srs, [], [])
    commitments = [kzg.commit(srs, v) for v in vectors]
    multi = kzg.open_multi(srs, vectors, [0, 1, 2])
    with pytest.raises(ValueError):
        kzg.verify_multi(srs, commitments[:2], [0, 1, 2], multi.values, multi.proof)
