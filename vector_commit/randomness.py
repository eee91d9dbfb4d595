"""
Randomness Sources
==================

Setup and blinding draw secret scalars from an injected source, so tests can
swap the group's CSPRNG for a seeded or fixed one.

Every source exposes ``scalar(modulus) -> int`` returning a non-zero value
in [1, modulus).
"""

import hashlib

from charm.toolbox.pairinggroup import PairingGroup, ZR


class GroupRandomSource:
    """Cryptographically secure scalars from the pairing group's RNG."""

    def __init__(self, group: PairingGroup):
        self.group = group

    def scalar(self, modulus: int) -> int:
        while True:
            value = int(self.group.random(ZR)) % modulus
            if value:
                return value


class SeededRandomSource:
    """
    Deterministic scalars for reproducible tests.

    SHA-256 in counter mode over the seed; each draw takes 16 bytes more than
    the modulus needs so the reduction bias stays below 2^-128.

    Notes
    -----
    Never use this for a real setup: anyone who knows the seed knows the
    trapdoor.
    """

    def __init__(self, seed: int = 0):
        self._seed = seed.to_bytes(16, 'big', signed=True)
        self._counter = 0

    def _block(self) -> bytes:
        self._counter += 1
        return hashlib.sha256(self._seed + self._counter.to_bytes(8, 'big')).digest()

    def scalar(self, modulus: int) -> int:
        width = (modulus.bit_length() + 7) // 8 + 16
        while True:
            data = b""
            while len(data) < width:
                data += self._block()
            value = int.from_bytes(data[:width], 'big') % modulus
            if value:
                return value


class FixedSecret:
    """Always returns the same scalar (toy setups such as τ = 5)."""

    def __init__(self, value: int):
        self.value = value

    def scalar(self, modulus: int) -> int:
        value = self.value % modulus
        if value == 0:
            raise ValueError("Fixed secret reduces to zero")
        return value
