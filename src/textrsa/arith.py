"""Elementary number theory on top of Python's arbitrary-precision `int`.

Provides the Extended Euclidean Algorithm and what we derive from it, mainly the modular inverse used to get the
private exponent.

Typical usage example:

    g, x, y = eea(240, 46)
    d = mod_inverse(17, 3120)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from textrsa.errors import InvalidInputError
from textrsa.errors import NoInverseError


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Finds s0, t0 such that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers.
        As well as the Bezout coefficients.

    Raises:
        InvalidInputError: If either number is negative or both are zero.
    """
    if a < 0 or b < 0:
        raise InvalidInputError("Both numbers must be non-negative.")
    if a == 0 and b == 0:
        raise InvalidInputError("gcd(0, 0) is undefined.")
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def gcd(a: int, b: int) -> int:
    """Greatest common divisor, via `eea`."""
    return eea(a, b)[0]


def mod_inverse(a: int, m: int) -> int:
    """Computes the inverse of `a` modulo `m`.

    Args:
        a: The number to invert. Must be non-negative.
        m: The modulus. Must be at least 2.

    Returns:
        The unique `x` in `[0, m)` with `a*x % m == 1`.

    Raises:
        InvalidInputError: If `m` is smaller than 2.
        NoInverseError: If `a` and `m` are not coprime.
    """
    if m < 2:
        raise InvalidInputError("Modulus must be at least 2.")
    g, x, _ = eea(a, m)
    if g != 1:
        raise NoInverseError(f"{a} and {m} are not coprime (gcd {g}).")
    if x < 0:
        x += m
    return x


def factor_out_twos(n: int) -> tuple[int, int]:
    """Split `n` into `2**s * d` with `d` odd.

    Args:
        n: Positive integer.

    Returns:
        Tuple of (s, d).
    """
    if n < 1:
        raise InvalidInputError("n must be positive.")
    s = (n & -n).bit_length() - 1
    return s, n >> s
