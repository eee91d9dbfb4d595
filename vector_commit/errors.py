"""
Errors and Verification Outcomes
================================

Three kinds of failure are kept apart:

- Configuration errors (``ConfigurationError``): bad sizes, indices or
  setup ordering. Raised before any cryptographic work and never retried.
- Malformed-input errors (``MalformedInputError``): corrupted or adversarial
  bytes and proofs. Always rejected outright.
- Verification outcomes (``Rejection``): a proof that does not check out is
  an expected result, reported through ``VerificationResult`` and never
  raised.
"""

import enum


class VectorCommitmentError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(VectorCommitmentError):
    """The caller asked for something the parameters cannot support."""


class SetupTooSmall(ConfigurationError):
    """Requested degree or domain size is zero or negative."""


class UnsupportedDomain(ConfigurationError):
    """The scalar field has no multiplicative subgroup of the requested size."""


class DegreeOverflow(ConfigurationError):
    """Vector is longer than the evaluation domain / reference string."""


class IndexOutOfDomain(ConfigurationError):
    """Index does not address a point of the evaluation domain."""


class SetupAlreadyDone(ConfigurationError):
    """setup() was called twice on the same scheme instance."""


class EmptyBatch(ConfigurationError):
    """A batch opening was requested for no indices at all."""


class MalformedInputError(VectorCommitmentError):
    """Input data is corrupted or adversarial."""


class DeserializationError(MalformedInputError):
    """Bytes do not decode to a canonical, on-curve value."""


class FoldLengthMismatch(MalformedInputError):
    """An IPA proof carries the wrong number of folding rounds."""


class Rejection(enum.Enum):
    """Reason a proof was rejected by a verifier."""

    PAIRING_MISMATCH = "pairing_mismatch"
    FOLDING_MISMATCH = "folding_mismatch"
    VALUE_MISMATCH = "value_mismatch"
