"""
Fiat-Shamir Transcript
======================

A transcript accumulates every message of one proof session and derives
verifier challenges from it, which makes the interactive protocols
non-interactive.

Domain Separation:
------------------
Each transcript starts with a protocol label, and every append is framed as

    len(label) || label || len(data) || data        (4-byte big-endian lengths)

so no two distinct append sequences produce the same byte history.

Challenge derivation:
---------------------
``challenge(label)`` hashes the full history together with the label in
counter mode until it has ``byte_length(p) + 16`` bytes, reads them as a
big-endian integer and reduces mod p. Reducing a value 128 bits wider than p
keeps the distance from the uniform distribution below 2^-128, whereas
reducing a single digest of p's width would noticeably favour small
residues. A zero result is re-derived with the next counter so challenges are
always invertible. The challenge is appended to the transcript before it is
returned, so two challenges never come from identical state.

A transcript belongs to exactly one prover or verifier session and must not
be shared across sessions or threads.
"""

import hashlib
from typing import Callable, Union

from .config import config
from .field import ScalarField

HashSpec = Union[str, Callable]

_EXTRA_BYTES = 16


def _as_bytes(label) -> bytes:
    if isinstance(label, str):
        return label.encode('utf-8')
    return bytes(label)


class Transcript:
    """
    Append-only Fiat-Shamir transcript.

    Parameters
    ----------
    protocol : str or bytes
        Protocol label absorbed first.
    field : ScalarField
        Field challenges are reduced into.
    hash_function : str or callable, optional
        A ``hashlib`` algorithm name with fixed-size output, or a callable
        returning a fresh hashlib-style object. Defaults to
        ``config.transcript_hash``.
    """

    def __init__(self, protocol, field: ScalarField, hash_function: HashSpec = None):
        self.field = field
        hash_function = hash_function or config.transcript_hash
        if isinstance(hash_function, str):
            name = hash_function
            self._new_hash = lambda: hashlib.new(name)
        else:
            self._new_hash = hash_function
        self._state = bytearray()
        self.append("protocol", _as_bytes(protocol))

    def append(self, label, data: bytes):
        label = _as_bytes(label)
        data = bytes(data)
        self._state += len(label).to_bytes(4, 'big') + label
        self._state += len(data).to_bytes(4, 'big') + data

    def append_int(self, label, value: int):
        self.append(label, int(value).to_bytes(8, 'big'))

    def append_scalar(self, label, value: int):
        self.append(label, self.field.to_bytes(value))

    def append_point(self, label, point, backend):
        self.append(label, backend.encode_point(point))

    def challenge(self, label) -> int:
        """Derive a non-zero scalar challenge and absorb it."""
        label = _as_bytes(label)
        width = self.field.byte_length + _EXTRA_BYTES
        counter = 0
        while True:
            output = b""
            block = 0
            while len(output) < width:
                h = self._new_hash()
                h.update(bytes(self._state))
                h.update(b"challenge")
                h.update(len(label).to_bytes(4, 'big') + label)
                h.update(counter.to_bytes(4, 'big'))
                h.update(block.to_bytes(4, 'big'))
                output += h.digest()
                block += 1
            value = int.from_bytes(output[:width], 'big') % self.field.modulus
            if value:
                break
            counter += 1

        self.append(label, self.field.to_bytes(value))
        return value

    def snapshot(self) -> bytes:
        """Copy of the accumulated bytes (for debugging and tests)."""
        return bytes(self._state)
