"""
Serialization
=============

Canonical byte encodings for the values that cross a trust boundary:
commitments and opening proofs.

Layout:
-------
- point      : flag(1) || uncompressed body        (fixed size per curve; see groups)
- scalar     : big-endian, byte_length(p) bytes, must be < p
- commitment : point
- KZGProof      : 0x01 || point || has_blinding(1) || [scalar]
- KZGBatchProof : 0x02 || point D || point π
- IPAProof      : 0x03 || rounds(2, big-endian) || (point L || point R)* || scalar a || scalar b
- IPABatchProof : 0x04 || point D || IPAProof

Every decoder rejects short or trailing input, unknown tags and flags,
non-canonical scalars and points outside G1 with ``DeserializationError``.
Base64 text helpers are provided for JSON/HTTP transport.
"""

import base64
import binascii

from .errors import DeserializationError
from .groups import PairingBackend
from .ipa import IPABatchProof, IPAProof
from .kzg import KZGBatchProof, KZGProof

TAG_KZG_PROOF = 0x01
TAG_KZG_BATCH_PROOF = 0x02
TAG_IPA_PROOF = 0x03
TAG_IPA_BATCH_PROOF = 0x04

MAX_IPA_ROUNDS = 64


class _Reader:
    """Cursor over an input buffer that refuses to over-read."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    def take(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise DeserializationError(
                f"Unexpected end of input: need {n} bytes at offset {self.pos}, have {len(self.data) - self.pos}")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def point(self, backend: PairingBackend):
        return backend.decode_point(self.take(backend.point_size))

    def scalar(self, backend: PairingBackend) -> int:
        try:
            return backend.field.from_bytes(self.take(backend.field.byte_length))
        except ValueError as exc:
            raise DeserializationError(str(exc)) from exc

    def finish(self):
        if self.pos != len(self.data):
            raise DeserializationError(f"{len(self.data) - self.pos} trailing bytes")


def encode_commitment(commitment, backend: PairingBackend) -> bytes:
    return backend.encode_point(commitment)


def decode_commitment(data: bytes, backend: PairingBackend):
    reader = _Reader(data)
    commitment = reader.point(backend)
    reader.finish()
    return commitment


def _encode_ipa_body(proof: IPAProof, backend: PairingBackend) -> bytes:
    if len(proof.rounds) > MAX_IPA_ROUNDS:
        raise ValueError(f"IPA proof has too many rounds: {len(proof.rounds)}")
    out = bytearray([TAG_IPA_PROOF])
    out += len(proof.rounds).to_bytes(2, 'big')
    for left, right in proof.rounds:
        out += backend.encode_point(left)
        out += backend.encode_point(right)
    out += backend.field.to_bytes(proof.a)
    out += backend.field.to_bytes(proof.b)
    return bytes(out)


def _read_ipa_body(reader: _Reader, backend: PairingBackend) -> IPAProof:
    tag = reader.byte()
    if tag != TAG_IPA_PROOF:
        raise DeserializationError(f"Expected IPA proof tag, got {tag:#04x}")
    count = int.from_bytes(reader.take(2), 'big')
    if count > MAX_IPA_ROUNDS:
        raise DeserializationError(f"IPA proof claims {count} rounds")
    rounds = tuple((reader.point(backend), reader.point(backend)) for _ in range(count))
    a = reader.scalar(backend)
    b = reader.scalar(backend)
    return IPAProof(rounds, a, b)


def encode_proof(proof, backend: PairingBackend) -> bytes:
    """
    Encode any opening proof.

    Parameters
    ----------
    proof : KZGProof, KZGBatchProof, IPAProof or IPABatchProof
    backend : PairingBackend
    """
    if isinstance(proof, KZGProof):
        out = bytearray([TAG_KZG_PROOF])
        out += backend.encode_point(proof.quotient)
        if proof.blinding_eval is None:
            out.append(0)
        else:
            out.append(1)
            out += backend.field.to_bytes(proof.blinding_eval)
        return bytes(out)
    if isinstance(proof, KZGBatchProof):
        return (bytes([TAG_KZG_BATCH_PROOF]) + backend.encode_point(proof.aggregate)
                + backend.encode_point(proof.opening))
    if isinstance(proof, IPAProof):
        return _encode_ipa_body(proof, backend)
    if isinstance(proof, IPABatchProof):
        return (bytes([TAG_IPA_BATCH_PROOF]) + backend.encode_point(proof.aggregate)
                + _encode_ipa_body(proof.opening, backend))
    raise TypeError(f"Cannot encode {type(proof).__name__}")


def decode_proof(data: bytes, backend: PairingBackend):
    """
    Decode a proof produced by ``encode_proof``.

    Raises
    ------
    DeserializationError
        On any malformed, truncated or non-canonical input.
    """
    reader = _Reader(data)
    tag = reader.data[0] if reader.data else None

    if tag == TAG_KZG_PROOF:
        reader.byte()
        quotient = reader.point(backend)
        has_blinding = reader.byte()
        if has_blinding not in (0, 1):
            raise DeserializationError(f"Invalid blinding flag {has_blinding}")
        blinding_eval = reader.scalar(backend) if has_blinding else None
        proof = KZGProof(quotient, blinding_eval)
    elif tag == TAG_KZG_BATCH_PROOF:
        reader.byte()
        proof = KZGBatchProof(reader.point(backend), reader.point(backend))
    elif tag == TAG_IPA_PROOF:
        proof = _read_ipa_body(reader, backend)
    elif tag == TAG_IPA_BATCH_PROOF:
        reader.byte()
        aggregate = reader.point(backend)
        proof = IPABatchProof(aggregate, _read_ipa_body(reader, backend))
    else:
        raise DeserializationError(f"Unknown proof tag {tag!r}")

    reader.finish()
    return proof


def to_base64(data: bytes) -> str:
    """Bytes → base64 text for JSON transport."""
    return base64.b64encode(data).decode('utf-8')


def from_base64(text: str) -> bytes:
    """base64 text → bytes; malformed text raises DeserializationError."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DeserializationError(f"Invalid base64: {exc}") from exc
