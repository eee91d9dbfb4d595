"""
Group Initialization and Setup
===============================

This module wraps a charm-crypto pairing group as the algebraic capability
consumed by the commitment schemes:

- G1 holds commitments, quotient commitments and IPA basis points
- G2 is the pairing partner group used by KZG verification
- pair(g1_elem, g2_elem) -> GT is the bilinear map

Charm writes groups multiplicatively: ``a * b`` is the group operation and
``a ** k`` is scalar multiplication by a ``ZR`` exponent.

Canonical point encoding
------------------------
Points are encoded as ``flag || raw`` where ``raw`` is the uncompressed point
body produced by ``group.serialize`` (base64 payload decoded). The identity
is encoded as flag 0 followed by zero bytes, since charm does not serialize
it reliably.
"""

import base64
import logging
from typing import Tuple

from charm.toolbox.pairinggroup import PairingGroup, ZR, G1, G2, pair

from .errors import DeserializationError
from .field import ScalarField

logger = logging.getLogger(__name__)

_FLAG_IDENTITY = 0
_FLAG_POINT = 1

# Curves tried, in order, when the requested one is unavailable.
FALLBACK_CURVES = ('BN254', 'MNT224', 'SS512')


class PairingBackend:
    """
    Field, group and pairing capabilities backed by one ``PairingGroup``.

    Parameters
    ----------
    group : PairingGroup
        The initialized charm pairing group.
    group_name : str
        The curve identifier used to build ``group``.

    Notes
    -----
    The generators g (G1) and h (G2) are derived by hashing fixed labels to
    the groups, so every party using the same curve agrees on them without
    exchanging anything.
    """

    def __init__(self, group: PairingGroup, group_name: str):
        self.group = group
        self.group_name = group_name
        self.field = ScalarField(int(group.order()))

        self.g1 = group.hash(b"vector_commit/generator/g1", G1)
        self.g2 = group.hash(b"vector_commit/generator/g2", G2)

        prefix, raw = self._split_serialized(self.g1)
        self._g1_prefix = prefix
        self.point_size = 1 + len(raw)

    def __repr__(self):
        return f"PairingBackend({self.group_name!r})"

    def identity(self) -> G1:
        """The neutral element of G1 (commitment to the zero vector)."""
        return self.group.init(G1, 1)

    def is_identity(self, elem: G1) -> bool:
        return elem == self.identity()

    def scalar(self, value: int) -> ZR:
        """Lift an integer to a charm ``ZR`` element."""
        return self.group.init(ZR, int(value) % self.field.modulus)

    def mul(self, point, k: int):
        """Scalar multiplication ``point^k`` in G1 or G2."""
        return point ** self.scalar(k)

    def neg(self, point):
        return point ** self.scalar(self.field.modulus - 1)

    def hash_to_g1(self, data: bytes) -> G1:
        return self.group.hash(data, G1)

    def pairing_eq(self, a1: G1, b1: G2, a2: G1, b2: G2) -> bool:
        """Check e(a1, b1) == e(a2, b2)."""
        return pair(a1, b1) == pair(a2, b2)

    def _split_serialized(self, elem) -> Tuple[bytes, bytes]:
        blob = self.group.serialize(elem, compression=False)
        prefix, payload = blob.split(b":", 1)
        return prefix + b":", base64.b64decode(payload)

    def encode_point(self, elem: G1) -> bytes:
        """Canonical fixed-size encoding of a G1 element."""
        if self.is_identity(elem):
            return bytes([_FLAG_IDENTITY]) + bytes(self.point_size - 1)
        _, raw = self._split_serialized(elem)
        return bytes([_FLAG_POINT]) + raw

    def decode_point(self, data: bytes) -> G1:
        """
        Decode and validate a G1 element.

        Raises
        ------
        DeserializationError
            If the length or flag is wrong, the point is not in G1, or the
            encoding is not the canonical one.
        """
        if len(data) != self.point_size:
            raise DeserializationError(
                f"Point encoding must be {self.point_size} bytes, got {len(data)}")

        flag, raw = data[0], bytes(data[1:])
        if flag == _FLAG_IDENTITY:
            if any(raw):
                raise DeserializationError("Identity encoding carries a payload")
            return self.identity()
        if flag != _FLAG_POINT:
            raise DeserializationError(f"Unknown point flag {flag}")

        try:
            elem = self.group.deserialize(self._g1_prefix + base64.b64encode(raw),
                                          compression=False)
        except Exception as exc:
            raise DeserializationError(f"Invalid point encoding: {exc}") from exc

        if elem is None or not self.group.ismember(elem):
            raise DeserializationError("Decoded point is not a member of G1")
        if self.encode_point(elem) != bytes(data):
            raise DeserializationError("Point encoding is not canonical")
        return elem


def setup_group(group_name: str = 'BN254') -> PairingBackend:
    """
    Initialize the pairing group used by the schemes.

    Parameters
    ----------
    group_name : str, optional
        The pairing curve identifier. Default is 'BN254', whose scalar field
        has 2-adicity 28 and therefore supports evaluation domains of up to
        2^28 points.

    Returns
    -------
    PairingBackend
        Capability wrapper around the initialized ``PairingGroup``.

    Notes
    -----
    If the requested curve cannot be loaded, the curves in
    ``FALLBACK_CURVES`` are tried in order and a warning is logged.
    """
    candidates = [group_name] + [c for c in FALLBACK_CURVES if c != group_name]
    last_error = None
    for name in candidates:
        try:
            group = PairingGroup(name)
        except Exception as e:
            logger.warning("Pairing curve %s not available (%s)", name, e)
            last_error = e
            continue
        if name != group_name:
            logger.warning("Falling back to pairing curve %s", name)
        logger.info("Initialized pairing group %s", name)
        return PairingBackend(group, name)
    raise RuntimeError(f"No pairing curve could be initialized: {last_error}")
