"""Core Key Generation Utility, mainly focusing on the generation of random primes and the exponents built on them.

This module is responsible for generating textbook RSA key pairs. Primes are probable primes certified by a
Miller-Rabin test with a caller-chosen number of rounds, after a cheap trial division by cached small primes.
All randomness comes from an injected random source, so key generation can be replayed under a seeded generator.

Typical usage example:

    (n, e), (_, d) = generate_key_pair(1024)
    (n, e), (_, d) = generate_key_pair(64, rounds=5, rng=random.Random(7))
    (n, e), (_, d) = derive_key_pair(61, 53, 17)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import secrets
from typing import Literal, overload, Protocol

from textrsa.arith import factor_out_twos
from textrsa.arith import gcd
from textrsa.arith import mod_inverse
from textrsa.errors import GenerationExhaustedError
from textrsa.errors import InvalidInputError
from textrsa.errors import NoInverseError

logger = logging.getLogger(__name__)

DEFAULT_EXPONENT: int = 65537
DEFAULT_ROUNDS: int = 20
DEFAULT_KEY_SIZE: int = 2048
MINIMUM_KEY_SIZE: int = 16
DEFAULT_KEY_ATTEMPTS: int = 16
_EXPONENT_ATTEMPTS: int = 100

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0


class RandomSource(Protocol):
    """What key generation needs from a random number generator.

    Satisfied by both `random.Random` (seedable, for tests) and `secrets.SystemRandom` (the default).
    """

    def getrandbits(self, k: int, /) -> int:
        ...

    def randrange(self, start: int, stop: int, step: int = 1, /) -> int:
        ...


def _source(rng: RandomSource | None) -> RandomSource:
    if rng is None:
        return secrets.SystemRandom()
    return rng


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Sieves odd numbers only, up to the root of `n`.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    odd_count = (n - 1) // 2
    candidate: list[bool] = [True] * odd_count
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, odd_count, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    The module-level list acts as a cache. It is regenerated if the requested range is greater, forced by `change`
    or the cache is empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Args:
         no: The number to check. Must be non-negative.
         n: Bound passed to `get_pre_primes()`.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime * prime > no:
            return True
        if no % prime == 0:
            return False
    return True


def miller_rabin(n: int, rounds: int, rng: RandomSource | None = None) -> bool:
    """Perform the Miller-Rabin primality test.

    Writes `n - 1` as `2**s * d` and checks `rounds` random witnesses from `[2, n - 2]`. A composite survives a single
    round with probability at most 1/4.

    Args:
        n: Integer to be tested.
        rounds: Number of witnesses to try. Must be at least 1.
        rng: Source of the witnesses. Defaults to a fresh `secrets.SystemRandom`.

    Returns:
        True if `n` is probably prime, False if it is certainly composite.

    Raises:
        InvalidInputError: If `rounds` is smaller than 1.
    """
    if rounds < 1:
        raise InvalidInputError("At least one Miller-Rabin round is required.")
    if n <= 3:
        return n in (2, 3)
    if n % 2 == 0:
        return False
    rng = _source(rng)
    s, d = factor_out_twos(n - 1)
    for _ in range(rounds):
        a = rng.randrange(2, n - 1)
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
            if x == 1:
                # Non-trivial square root of 1.
                return False
        else:
            return False
    return True


def check_prime(candidate: int, rounds: int = DEFAULT_ROUNDS, rng: RandomSource | None = None, n: int = 10000) -> bool:
    """Trial division by the small primes up to `n`, followed by a Miller-Rabin test.

    Args:
        candidate: The candidate prime to test.
        rounds: Number of Miller-Rabin rounds. Defaults to `DEFAULT_ROUNDS`.
        rng: Source of Miller-Rabin witnesses.
        n: Bound passed to `_trial_division()`.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    return miller_rabin(candidate, rounds, rng)


def random_odd_integer(bits: int, rng: RandomSource) -> int:
    """Draw an odd integer of exactly `bits` bits.

    The top two bits are set, so the product of two such numbers has exactly `2 * bits` bits.

    Args:
        bits: Bit length of the result. Must be at least 2.
        rng: The random source to draw from.

    Returns:
        The drawn integer.
    """
    if bits < 2:
        raise InvalidInputError("Need at least 2 bits.")
    msk = (1 << bits - 1) | (1 << bits - 2) | 1
    return rng.getrandbits(bits) | msk


def generate_probable_prime(bits: int,
                            rounds: int = DEFAULT_ROUNDS,
                            rng: RandomSource | None = None,
                            pub: int | None = None,
                            attempts: int | None = None) -> int:
    """Generate a probable prime number of the specified bit size.

    Args:
        bits: The size of the prime to generate in bits.
        rounds: Miller-Rabin rounds per candidate.
        rng: Random source for candidates and witnesses.
        pub: A fixed public exponent the prime will be used with. If given, candidates with `gcd(p - 1, pub) != 1`
            are skipped.
        attempts: Maximum number of candidates to draw. Defaults to `5 * bits`.

    Returns:
        A probable prime number.

    Raises:
        GenerationExhaustedError: If no prime was found within `attempts` draws.
    """
    rng = _source(rng)
    if attempts is None:
        attempts = 5 * bits
    for draw in range(1, attempts + 1):
        candidate = random_odd_integer(bits, rng)
        if pub is not None and gcd(candidate - 1, pub) != 1:
            continue
        if check_prime(candidate, rounds, rng):
            logger.debug("Found %d-bit probable prime after %d draws.", bits, draw)
            return candidate
    raise GenerationExhaustedError(
        f"Drew an improbable {attempts} candidates with no prime found. Check the random number generator.")


def generate_primes(size: int,
                    rounds: int = DEFAULT_ROUNDS,
                    rng: RandomSource | None = None,
                    pub: int | None = DEFAULT_EXPONENT,
                    attempts: int | None = None) -> tuple[int, int]:
    """Generates a pair of distinct primes for a modulus of `size` bits.

    Args:
        size: The key size to generate the prime pair for. Must be even and at least `MINIMUM_KEY_SIZE`.
        rounds: Miller-Rabin rounds per candidate.
        rng: Random source shared by both primes.
        pub: Public exponent the primes have to suit, see `generate_probable_prime`.
        attempts: Per-prime draw cap, see `generate_probable_prime`.

    Returns:
        A pair of distinct primes, each `size // 2` bits long.

    Raises:
        InvalidInputError: If `size` is odd or too small, or `pub` is even or not positive.
        GenerationExhaustedError: If sampling ran out of attempts.
    """
    if size < MINIMUM_KEY_SIZE:
        raise InvalidInputError(f"Size must be at least {MINIMUM_KEY_SIZE}.")
    if size % 2 != 0:
        raise InvalidInputError("Size must be an even number.")
    if pub is not None and (pub < 1 or pub % 2 == 0):
        raise InvalidInputError("Public exponent must be odd and positive.")
    rng = _source(rng)
    p = generate_probable_prime(size // 2, rounds, rng, pub, attempts)
    for _ in range(DEFAULT_KEY_ATTEMPTS):
        q = generate_probable_prime(size // 2, rounds, rng, pub, attempts)
        if q != p:
            return p, q
        logger.debug("Drew p == q, drawing q again.")
    raise GenerationExhaustedError("Could not draw a second prime distinct from the first.")


def select_exponents(phi: int,
                     pub: int | None = DEFAULT_EXPONENT,
                     rng: RandomSource | None = None,
                     attempts: int = _EXPONENT_ATTEMPTS) -> tuple[int, int]:
    """Pick the public exponent for a totient and derive the matching private exponent.

    A fixed `pub` is used as is when `1 < pub < phi`; a non-coprime fixed exponent cannot be resampled, so the
    `NoInverseError` goes to the caller. Otherwise odd exponents are drawn from `[3, phi)` until one is invertible.

    Args:
        phi: Euler's totient of the modulus. Must be at least 4.
        pub: Preferred public exponent, or None to always draw one.
        rng: Random source for drawn exponents.
        attempts: Maximum number of exponents to draw.

    Returns:
        Tuple of (public exponent, private exponent).

    Raises:
        InvalidInputError: If `phi` is too small to hold an exponent.
        NoInverseError: If the fixed `pub` is not coprime with `phi`.
        GenerationExhaustedError: If no drawn exponent was coprime with `phi`.
    """
    if phi < 4:
        raise InvalidInputError("Totient too small for a public exponent.")
    if pub is not None:
        if 1 < pub < phi:
            return pub, mod_inverse(pub, phi)
        logger.debug("Public exponent %d does not fit below the totient, drawing one instead.", pub)
    rng = _source(rng)
    for _ in range(attempts):
        e = rng.randrange(3, phi, 2)
        try:
            return e, mod_inverse(e, phi)
        except NoInverseError:
            logger.debug("Drawn exponent not coprime with the totient, drawing again.")
    raise GenerationExhaustedError(f"No public exponent coprime with the totient in {attempts} draws.")


def derive_key_pair(p: int, q: int, pub: int = DEFAULT_EXPONENT) -> tuple[tuple[int, int], tuple[int, int]]:
    """Derive the key pair for known primes and a known public exponent.

    Args:
        p: First prime.
        q: Second prime, distinct from `p`.
        pub: The public exponent. Must satisfy `1 < pub < (p - 1) * (q - 1)`.

    Returns:
        A tuple of (public, private) sub-tuples (modulus, exponent).

    Raises:
        InvalidInputError: If the primes or the exponent are out of range.
        NoInverseError: If `pub` is not coprime with the totient.
    """
    if p < 2 or q < 2:
        raise InvalidInputError("Primes must be greater than 1.")
    if p == q:
        raise InvalidInputError("Primes must be distinct.")
    n = p * q
    phi = (p - 1) * (q - 1)
    if not 1 < pub < phi:
        raise InvalidInputError("Public exponent must be in range (1, phi).")
    d = mod_inverse(pub, phi)
    return (n, pub), (n, d)


@overload
def generate_key_pair(size: int = ...,
                      pub: int | None = ...,
                      *,
                      rounds: int = ...,
                      rng: RandomSource | None = ...,
                      expose_primes: Literal[False] = ...,
                      attempts: int = ...) -> tuple[tuple[int, int], tuple[int, int]]:
    ...


@overload
def generate_key_pair(size: int = ...,
                      pub: int | None = ...,
                      *,
                      rounds: int = ...,
                      rng: RandomSource | None = ...,
                      expose_primes: Literal[True],
                      attempts: int = ...) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    ...


def generate_key_pair(
    size: int = DEFAULT_KEY_SIZE,
    pub: int | None = DEFAULT_EXPONENT,
    *,
    rounds: int = DEFAULT_ROUNDS,
    rng: RandomSource | None = None,
    expose_primes: bool = False,
    attempts: int = DEFAULT_KEY_ATTEMPTS
) -> tuple[tuple[int, int], tuple[int, int]] | tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Samples two primes, computes `n = p * q` and `phi = (p - 1) * (q - 1)`, then picks `e` and `d = e^-1 mod phi`.
    When the exponent has no inverse the primes are sampled again, at most `attempts` times.

    Args:
        size: Bit length of the modulus. Must be even and at least `MINIMUM_KEY_SIZE`.
        pub: The public exponent. Defaults to 65537; None draws a random one. Replaced by a random draw when it does
            not fit below the totient, which only happens for toy key sizes.
        rounds: Miller-Rabin rounds per prime candidate.
        rng: Random source for the whole generation. Defaults to a fresh `secrets.SystemRandom`.
        expose_primes: Whether to return the prime numbers as well or not. Defaults to False.
        attempts: Maximum number of prime pairs to try.

    Returns:
        A tuple of (public, private) sub-tuples (modulus, exponent) or if exposed for the private
        (modulus, exponent, p, q)

    Raises:
        InvalidInputError: If `size` or `rounds` are invalid.
        GenerationExhaustedError: If any sampling loop ran out of attempts.
    """
    if rounds < 1:
        raise InvalidInputError("At least one Miller-Rabin round is required.")
    rng = _source(rng)
    for _ in range(attempts):
        p, q = generate_primes(size, rounds, rng, pub)
        n = p * q
        phi = (p - 1) * (q - 1)
        try:
            e, d = select_exponents(phi, pub, rng)
        except NoInverseError:
            logger.debug("Public exponent not invertible for this prime pair, sampling new primes.")
            continue
        if not expose_primes:
            return (n, e), (n, d)
        return (n, e), (n, d, p, q)
    raise GenerationExhaustedError(f"No usable key pair in {attempts} prime pairs.")
