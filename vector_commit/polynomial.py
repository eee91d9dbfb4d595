"""
Polynomial Encoding
===================

A vector of length ≤ n is read as the evaluations of a polynomial over the
evaluation domain {ω^0, ω^1, ..., ω^{n-1}}, where ω is a primitive n-th root
of unity and n is a power of two:

    vector[i] = p(ω^i)

Interpolation and re-evaluation use a radix-2 FFT over numpy object arrays
(Python integers, so no overflow), giving O(n log n) encoding.
The same butterfly runs over G1 elements for amortized KZG openings.

Barycentric form:
-----------------
For a point z outside the domain, the Lagrange basis evaluated at z is

    L_i(z) = (z^n - 1)/n · ω^i / (z - ω^i)

so that f(z) = ∑ f(ω^i) L_i(z) can be computed directly from evaluations.
"""

from typing import Dict, List, Sequence

import numpy as np

from .errors import DegreeOverflow, SetupTooSmall
from .field import ScalarField
from .utils import next_power_of_two, powers_of


def _fft(values: np.ndarray, root: int, modulus: int) -> np.ndarray:
    n = len(values)
    if n == 1:
        return values.copy()
    root_sq = root * root % modulus
    even = _fft(values[0::2], root_sq, modulus)
    odd = _fft(values[1::2], root_sq, modulus)
    twiddles = np.array(powers_of(root, n // 2, modulus), dtype=object)
    t = (odd * twiddles) % modulus
    return np.concatenate(((even + t) % modulus, (even - t) % modulus))


def _fft_points(points: list, root: int, modulus: int, backend) -> list:
    # Same butterfly as _fft, written multiplicatively over group elements
    n = len(points)
    if n == 1:
        return list(points)
    root_sq = root * root % modulus
    even = _fft_points(points[0::2], root_sq, modulus, backend)
    odd = _fft_points(points[1::2], root_sq, modulus, backend)
    low, high = [], []
    for e, o, w in zip(even, odd, powers_of(root, n // 2, modulus)):
        t = backend.mul(o, w)
        low.append(e * t)
        high.append(e * backend.neg(t))
    return low + high


class EvaluationDomain:
    """
    Multiplicative subgroup of order n used to index vector entries.

    Parameters
    ----------
    size : int
        Requested size; rounded up to the next power of two.
    field : ScalarField
        The scalar field of the pairing group.

    Raises
    ------
    SetupTooSmall
        If ``size`` is not positive.
    UnsupportedDomain
        If the field has no subgroup of the rounded size.
    """

    def __init__(self, size: int, field: ScalarField):
        if size <= 0:
            raise SetupTooSmall(f"Domain size must be positive, got {size}")
        self.field = field
        self.size = next_power_of_two(size)
        self.log_size = self.size.bit_length() - 1

        p = field.modulus
        self.root = field.root_of_unity(self.size)
        self.root_inv = field.inv(self.root)
        self.size_inv = field.inv(self.size)
        self._elements = tuple(powers_of(self.root, self.size, p))
        self._index: Dict[int, int] = {e: i for i, e in enumerate(self._elements)}

    def __len__(self):
        return self.size

    def __repr__(self):
        return f"EvaluationDomain(size={self.size})"

    def __eq__(self, other):
        if not isinstance(other, EvaluationDomain):
            return NotImplemented
        return self.size == other.size and self.field.modulus == other.field.modulus

    def __hash__(self):
        return hash((self.size, self.field.modulus))

    def element(self, index: int) -> int:
        return self._elements[index]

    def elements(self) -> Sequence[int]:
        return self._elements

    def index_of(self, point: int):
        """Return i such that ω^i == point, or None for points off the domain."""
        return self._index.get(point % self.field.modulus)

    def contains(self, index: int) -> bool:
        return 0 <= index < self.size

    def fft(self, coeffs: Sequence[int]) -> List[int]:
        """Coefficients (zero-padded to n) → evaluations over the domain."""
        padded = np.zeros(self.size, dtype=object)
        padded[:len(coeffs)] = [int(c) for c in coeffs]
        return [int(v) for v in _fft(padded, self.root, self.field.modulus)]

    def ifft(self, evals: Sequence[int]) -> List[int]:
        """Evaluations over the domain → coefficients."""
        p = self.field.modulus
        values = np.zeros(self.size, dtype=object)
        values[:len(evals)] = [int(v) for v in evals]
        coeffs = (_fft(values, self.root_inv, p) * self.size_inv) % p
        return [int(c) for c in coeffs]

    def _pad_points(self, points, backend) -> list:
        if len(points) > self.size:
            raise DegreeOverflow(f"{len(points)} points do not fit domain of size {self.size}")
        return list(points) + [backend.identity()] * (self.size - len(points))

    def fft_points(self, points: Sequence, backend) -> list:
        """FFT over G1: result[j] = ∏_k points[k]^{ω^{jk}}, identity-padded to n."""
        return _fft_points(self._pad_points(points, backend), self.root, self.field.modulus, backend)

    def ifft_points(self, points: Sequence, backend) -> list:
        """Inverse of ``fft_points``."""
        p = self.field.modulus
        out = _fft_points(self._pad_points(points, backend), self.root_inv, p, backend)
        return [backend.mul(point, self.size_inv) for point in out]

    def vanishing_eval(self, z: int) -> int:
        """Z(z) = z^n - 1"""
        return (pow(z, self.size, self.field.modulus) - 1) % self.field.modulus

    def barycentric_coefficients(self, z: int) -> List[int]:
        """
        Weights b with ∑ b_i f(ω^i) = f(z).

        For z in the domain this is the unit vector at z's index.
        """
        p = self.field.modulus
        index = self.index_of(z)
        if index is not None:
            coeffs = [0] * self.size
            coeffs[index] = 1
            return coeffs

        t = self.vanishing_eval(z) * self.size_inv % p
        inverses = self.field.batch_inverse([(z - w) % p for w in self._elements])
        return [t * w % p * inv % p for w, inv in zip(self._elements, inverses)]


class Polynomial:
    """
    Polynomial over Z_p in coefficient form, ``coeffs[0]`` the constant term.

    Built by ``encode`` or by the quotient constructions of the schemes.
    """

    def __init__(self, coeffs: Sequence[int], field: ScalarField):
        self.field = field
        self.coeffs = [int(c) % field.modulus for c in coeffs]

    @property
    def degree(self) -> int:
        """Degree, -1 for the zero polynomial."""
        for i in range(len(self.coeffs) - 1, -1, -1):
            if self.coeffs[i]:
                return i
        return -1

    def __repr__(self):
        return f"Polynomial(degree={self.degree})"

    def __eq__(self, other):
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self._trimmed() == other._trimmed()

    def _trimmed(self):
        return self.coeffs[:self.degree + 1]

    def evaluate(self, x: int) -> int:
        """Evaluate polynomial at x using Horner's method."""
        p = self.field.modulus
        result = 0
        for c in reversed(self.coeffs):
            result = (result * x + c) % p
        return result

    def __add__(self, other: 'Polynomial') -> 'Polynomial':
        n = max(len(self.coeffs), len(other.coeffs))
        a = self.coeffs + [0] * (n - len(self.coeffs))
        b = other.coeffs + [0] * (n - len(other.coeffs))
        return Polynomial([x + y for x, y in zip(a, b)], self.field)

    def __sub__(self, other: 'Polynomial') -> 'Polynomial':
        return self + other.scale(self.field.modulus - 1)

    def scale(self, k: int) -> 'Polynomial':
        return Polynomial([c * k for c in self.coeffs], self.field)

    def divide_by_linear(self, z: int):
        """
        Synthetic division by (X - z).

        Returns
        -------
        (Polynomial, int)
            Quotient q and remainder r with p(X) = q(X)(X - z) + r; r = p(z),
            so q is exactly (p(X) - p(z)) / (X - z).
        """
        p = self.field.modulus
        coeffs = self.coeffs
        if len(coeffs) <= 1:
            return Polynomial([0], self.field), (coeffs[0] if coeffs else 0)

        quotient = [0] * (len(coeffs) - 1)
        carry = 0
        for k in range(len(coeffs) - 1, 0, -1):
            carry = (coeffs[k] + z * carry) % p
            quotient[k - 1] = carry
        remainder = (coeffs[0] + z * carry) % p
        return Polynomial(quotient, self.field), remainder

    def evaluations(self, domain: EvaluationDomain) -> List[int]:
        if self.degree >= domain.size:
            raise DegreeOverflow(f"Degree {self.degree} does not fit domain of size {domain.size}")
        return domain.fft(self._trimmed())


def prepare_vector(domain: EvaluationDomain, vector: Sequence) -> List[int]:
    """
    Reduce entries mod p and zero-pad to the domain size.

    Raises
    ------
    DegreeOverflow
        If the vector is longer than the domain.
    """
    if len(vector) > domain.size:
        raise DegreeOverflow(f"Vector length {len(vector)} exceeds domain size {domain.size}")
    values = [domain.field.reduce(v) for v in vector]
    return values + [0] * (domain.size - len(values))


def encode(domain: EvaluationDomain, vector: Sequence) -> Polynomial:
    """
    Interpolate the polynomial of degree < n with p(ω^i) = vector[i].

    Missing trailing entries are treated as zero.

    Raises
    ------
    DegreeOverflow
        If the vector is longer than the domain.
    """
    evals = prepare_vector(domain, vector)
    return Polynomial(domain.ifft(evals), domain.field)


def evaluate(poly: Polynomial, point: int) -> int:
    """Evaluate ``poly`` at any field point, in or out of the domain."""
    return poly.evaluate(point)
