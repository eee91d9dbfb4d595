"""
Scalar Field
============

Arithmetic in Z_p where p is the order of the pairing group. Scalars are
plain Python integers in [0, p); all polynomial and folding arithmetic is
done on integers, and values are lifted to charm ``ZR`` elements only when a
group element is exponentiated.
"""

from typing import List

from .errors import UnsupportedDomain


class ScalarField:
    """
    The prime field Z_p.

    Parameters
    ----------
    modulus : int
        The prime p (``int(group.order())``).
    """

    def __init__(self, modulus: int):
        self.modulus = modulus
        self.byte_length = (modulus.bit_length() + 7) // 8

    def __repr__(self):
        return f"ScalarField(bits={self.modulus.bit_length()})"

    def reduce(self, value) -> int:
        return int(value) % self.modulus

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.modulus

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.modulus

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.modulus

    def neg(self, a: int) -> int:
        return (-a) % self.modulus

    def pow(self, a: int, e: int) -> int:
        return pow(a, e, self.modulus)

    def inv(self, a: int) -> int:
        """Multiplicative inverse via Fermat's little theorem."""
        if a % self.modulus == 0:
            raise ZeroDivisionError("Cannot invert zero")
        return pow(a, self.modulus - 2, self.modulus)

    def div(self, a: int, b: int) -> int:
        return self.mul(a, self.inv(b))

    def batch_inverse(self, values: List[int]) -> List[int]:
        """
        Invert every value with a single field inversion (Montgomery's trick).

        Raises
        ------
        ZeroDivisionError
            If any value is zero.
        """
        p = self.modulus
        prefix = []
        acc = 1
        for v in values:
            if v % p == 0:
                raise ZeroDivisionError("Cannot invert zero")
            prefix.append(acc)
            acc = acc * v % p

        acc_inv = self.inv(acc)
        result = [0] * len(values)
        for i in range(len(values) - 1, -1, -1):
            result[i] = acc_inv * prefix[i] % p
            acc_inv = acc_inv * values[i] % p
        return result

    def root_of_unity(self, n: int) -> int:
        """
        Return a primitive n-th root of unity, n a power of two.

        Candidates x = 2, 3, ... are raised to (p-1)/n; the first result whose
        order is exactly n is returned, so the choice is deterministic.
        """
        p = self.modulus
        if n <= 0 or n & (n - 1):
            raise ValueError(f"Domain size {n} is not a power of two")
        if (p - 1) % n:
            raise UnsupportedDomain(f"Field has no subgroup of order {n}")
        if n == 1:
            return 1

        cofactor = (p - 1) // n
        for x in range(2, 1 << 16):
            w = pow(x, cofactor, p)
            if pow(w, n // 2, p) != 1:
                return w
        raise UnsupportedDomain(f"No primitive root of order {n} found")

    def to_bytes(self, value: int) -> bytes:
        """Fixed-width big-endian encoding."""
        return int(value % self.modulus).to_bytes(self.byte_length, 'big')

    def from_bytes(self, data: bytes) -> int:
        """
        Decode a canonical scalar.

        Raises
        ------
        ValueError
            If the length is wrong or the value is not below p.
        """
        if len(data) != self.byte_length:
            raise ValueError(f"Scalar must be {self.byte_length} bytes, got {len(data)}")
        value = int.from_bytes(data, 'big')
        if value >= self.modulus:
            raise ValueError("Scalar encoding is not canonical")
        return value
