"""
Shared fixtures: one BN254 backend per session, one set-up scheme of each
kind per test module.
"""

import pytest

from vector_commit.groups import setup_group
from vector_commit.ipa import IPA
from vector_commit.kzg import KZG
from vector_commit.randomness import SeededRandomSource

# Scalar field order of BN254
BN254_R = 21888242871839275222246405745257275088548364400416034343698204186575808495617


@pytest.fixture(scope="session")
def backend():
    """Initialize the BN254 pairing group."""
    return setup_group('BN254')


@pytest.fixture(scope="session")
def field(backend):
    return backend.field


@pytest.fixture(scope="module")
def kzg(backend):
    return KZG(backend)


@pytest.fixture(scope="module")
def srs(kzg):
    """KZG reference string over a domain of 8 points, deterministic τ."""
    return kzg.setup(7, SeededRandomSource(1))


@pytest.fixture(scope="module")
def ipa(backend):
    return IPA(backend)


@pytest.fixture(scope="module")
def ipa_params(ipa):
    """IPA parameters over a domain of 8 points."""
    return ipa.setup(8, b"vector_commit/tests")


@pytest.fixture
def vector():
    return [3, 1, 4, 1, 5, 9, 2, 6]
