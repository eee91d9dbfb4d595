"""
Utility Functions
=================

This module provides the vector helpers shared by both schemes.

Key Operations:
- Multi-scalar multiplication: Compute ∏ g_i^{e_i}, optionally split across
  worker threads
- Inner products and folding of scalar vectors
- Folding of point vectors for the inner-product argument
- Powers of a scalar

Scalars are integers modulo p; points are charm group elements written
multiplicatively (``*`` adds points, ``**`` multiplies by a scalar).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Below this many terms a thread pool costs more than it saves.
MIN_PARALLEL_TERMS = 64


def _msm_serial(bases, exponents, backend):
    result = backend.identity()
    for base, exp in zip(bases, exponents):
        if exp:
            result *= backend.mul(base, exp)
    return result


def msm(bases: Sequence, exponents: Sequence[int], backend, workers: int = 1):
    """
    Compute multi-scalar multiplication: ∏ bases[i]^{exponents[i]}.

    Parameters
    ----------
    bases : Sequence[G1]
        Group elements.
    exponents : Sequence[int]
        Scalars modulo p; zero terms are skipped.
    backend : PairingBackend
        Supplies the identity and scalar lifting.
    workers : int, optional
        Number of threads. With more than one worker the terms are cut into
        contiguous chunks, each chunk is summed independently, and the
        partial sums are combined in chunk order.

    Returns
    -------
    G1
        The product; the identity if ``bases`` is empty.
    """
    if len(bases) != len(exponents):
        raise ValueError(f"bases and exponents must have same length: {len(bases)} != {len(exponents)}")

    if workers <= 1 or len(bases) < MIN_PARALLEL_TERMS:
        return _msm_serial(bases, exponents, backend)

    chunk = -(-len(bases) // workers)
    spans = [(i, min(i + chunk, len(bases))) for i in range(0, len(bases), chunk)]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        partials = list(pool.map(
            lambda span: _msm_serial(bases[span[0]:span[1]], exponents[span[0]:span[1]], backend),
            spans))

    result = backend.identity()
    for part in partials:
        result *= part
    return result


def inner_product(a: Sequence[int], b: Sequence[int], modulus: int) -> int:
    """Compute ∑ a_i b_i mod p."""
    if len(a) != len(b):
        raise ValueError(f"vectors must have same length: {len(a)} != {len(b)}")
    return sum(x * y for x, y in zip(a, b)) % modulus


def split(values: Sequence[T]) -> Tuple[List[T], List[T]]:
    """Split a vector into its lower and upper halves."""
    half = len(values) // 2
    return list(values[:half]), list(values[half:])


def fold_scalars(left: Sequence[int], right: Sequence[int], x: int, modulus: int) -> List[int]:
    """res_i = left_i + x * right_i"""
    if len(left) != len(right):
        raise ValueError(f"halves must have same length: {len(left)} != {len(right)}")
    return [(l + x * r) % modulus for l, r in zip(left, right)]


def fold_points(left: Sequence, right: Sequence, x: int, backend) -> list:
    """res_i = left_i · right_i^x"""
    if len(left) != len(right):
        raise ValueError(f"halves must have same length: {len(left)} != {len(right)}")
    x_zr = backend.scalar(x)
    return [l * (r ** x_zr) for l, r in zip(left, right)]


def powers_of(x: int, n: int, modulus: int) -> List[int]:
    """Return [1, x, x^2, ..., x^{n-1}] mod p."""
    result = []
    cur = 1
    for _ in range(n):
        result.append(cur)
        cur = cur * x % modulus
    return result


def next_power_of_two(n: int) -> int:
    return 1 if n <= 1 else 1 << (n - 1).bit_length()
