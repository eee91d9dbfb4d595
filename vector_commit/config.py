"""
Vector commitment configuration.

Defaults are read from the environment once at import time; the global
``config`` instance may be adjusted by applications before schemes are built.
"""

import logging
import os

# Defaults
DEFAULT_PAIRING_CURVE = os.getenv('VC_PAIRING_CURVE', 'BN254')
DEFAULT_MSM_WORKERS = int(os.getenv('VC_MSM_WORKERS', 1))
DEFAULT_TRANSCRIPT_HASH = os.getenv('VC_TRANSCRIPT_HASH', 'sha256')
DEFAULT_IPA_SEED = os.getenv('VC_IPA_SEED', 'vector_commit/ipa')
DEFAULT_LOG_LEVEL = os.getenv('VC_LOG_LEVEL', 'WARNING')


class Config:
    """Runtime configuration."""

    def __init__(self):
        self.pairing_curve = DEFAULT_PAIRING_CURVE
        self.msm_workers = max(1, DEFAULT_MSM_WORKERS)
        self.transcript_hash = DEFAULT_TRANSCRIPT_HASH
        self.ipa_seed = DEFAULT_IPA_SEED
        self.log_level = DEFAULT_LOG_LEVEL

    @property
    def ipa_seed_bytes(self) -> bytes:
        return self.ipa_seed.encode('utf-8')


def configure_logging(level: str = None):
    """Attach a basic handler to the package logger (for scripts, not libraries)."""
    level = level or config.log_level
    logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
    logging.getLogger('vector_commit').setLevel(level.upper())


# Global configuration instance
config = Config()
