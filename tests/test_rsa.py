# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import math
import random

from cryptography.hazmat.primitives.asymmetric import rsa
import pytest

import textrsa
import textrsa.rsa as rsau
from textrsa.errors import InvalidInputError

TARGET_SIZES = [16, 64, 512, pytest.param(1024, marks=pytest.mark.slow)]


@pytest.fixture(scope="module")
def textbook() -> rsau.RSAPrivKey:
    return rsau.RSAPrivKey.from_primes(61, 53, 17)


@pytest.fixture(scope="module", params=TARGET_SIZES)
def keypair(request) -> rsau.KeyPair:
    return rsau.generate_keypair(request.param, rng=random.Random(request.param))


@pytest.fixture(scope="module")
def crypto_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=1024)


def test_textbook_components(textbook):
    assert textbook.mod == 3233
    assert textbook.expo == 2753
    assert textbook.pub.mod == 3233
    assert textbook.pub.expo == 17


def test_textbook_encrypt(textbook):
    assert textbook.pub.encrypt(65) == 2790
    assert textrsa.encrypt(textbook.pub, 65) == 2790


def test_textbook_decrypt(textbook):
    assert textbook.decrypt(2790) == 65
    assert textrsa.decrypt(textbook, 2790) == 65


def test_textbook_exhaustive(textbook):
    for m in range(textbook.mod):
        assert textbook.decrypt(textbook.pub.encrypt(m)) == m


def test_roundtrip(keypair):
    public, private = keypair
    n = public.mod
    src = random.Random(n)
    messages = [0, 1, 2, n - 2, n - 1] + [src.randrange(n) for _ in range(25)]
    for m in messages:
        c = rsau.encrypt(public, m)
        assert 0 <= c < n
        assert rsau.decrypt(private, c) == m


def test_roundtrip_non_coprime():
    # Multiples of a prime factor share it with the modulus and still round-trip.
    (_, _), (_, _, p, q) = textrsa.generate_key_pair(64, rng=random.Random(5), expose_primes=True)
    key = rsau.RSAPrivKey.from_primes(p, q)
    for m in (p, 2 * p, q, 3 * q):
        assert math.gcd(m, key.mod) > 1
        assert key.decrypt(key.pub.encrypt(m)) == m


def test_keypair_shape(keypair):
    public, private = keypair
    assert public == private.pub
    assert public.mod == private.mod
    assert 1 < public.expo < public.mod
    assert 0 < private.expo < public.mod


@pytest.mark.parametrize("message", [3233, 3234, -1, -3233, 2**64])
def test_encrypt_out_of_range(textbook, message):
    with pytest.raises(InvalidInputError):
        textbook.pub.encrypt(message)


@pytest.mark.parametrize("ciphertext", [3233, -1])
def test_decrypt_out_of_range(textbook, ciphertext):
    with pytest.raises(ValueError):
        textbook.decrypt(ciphertext)


@pytest.mark.parametrize("mod,expo", [(1, 3), (0, 3), (3233, 0), (3233, -17)])
def test_key_validates(mod, expo):
    with pytest.raises(InvalidInputError):
        rsau.RSAPubKey(mod, expo)


def test_key_read_only(textbook):
    with pytest.raises(AttributeError):
        textbook.mod = 11
    with pytest.raises(AttributeError):
        textbook.pub.expo = 3
    with pytest.raises(AttributeError):
        textbook.pub = rsau.RSAPubKey(3233, 3)
    assert textbook.pub.expo == 17


def test_key_equality(textbook):
    assert rsau.RSAPubKey(3233, 17) == textbook.pub
    assert rsau.RSAPubKey(3233, 17) != rsau.RSAPubKey(3233, 7)
    assert rsau.RSAPrivKey(3233, 17, 2753) == textbook
    assert rsau.RSAPubKey(3233, 2753) != textbook
    assert len({rsau.RSAPubKey(3233, 17), textbook.pub}) == 1


def test_key_repr_hides_numbers(textbook):
    assert "2753" not in repr(textbook)
    assert repr(textbook.pub) == "RSAPubKey(mod=<12 bits>)"


def test_bsize(textbook):
    assert textbook.bsize == 2
    assert rsau.RSAPubKey(2**1024 - 1, 3).bsize == 128
    assert rsau.RSAPubKey(2**1024, 3).bsize == 129


def test_private_generation(mocker):
    mocker.patch("textrsa.keygen.generate_key_pair", return_value=((3233, 17), (3233, 2753)))
    reskey = rsau.RSAPrivKey.generate(16, 17)
    assert reskey == rsau.RSAPrivKey(3233, 17, 2753)
    textrsa.keygen.generate_key_pair.assert_called_once_with(16, 17, rounds=textrsa.keygen.DEFAULT_ROUNDS, rng=None)


def test_generate_keypair_deterministic():
    first = rsau.generate_keypair(128, rng=random.Random(1))
    second = rsau.generate_keypair(128, rng=random.Random(1))
    assert first == second
    assert isinstance(first, rsau.KeyPair)
    assert first.public is first.private.pub


def test_from_primes_real(crypto_key):
    privs = crypto_key.private_numbers()
    pubs = crypto_key.public_key().public_numbers()
    key = rsau.RSAPrivKey.from_primes(privs.p, privs.q, pubs.e)
    assert key.mod == pubs.n
    assert key.pub.expo == pubs.e
    m = 17092025232642
    c = key.pub.encrypt(m)
    # The reference key may use a private exponent reduced modulo lcm(p - 1, q - 1).
    assert pow(c, privs.d, pubs.n) == m
    assert key.decrypt(c) == m


def test_from_primes_validates():
    with pytest.raises(InvalidInputError):
        rsau.RSAPrivKey.from_primes(61, 61, 17)
    with pytest.raises(textrsa.NoInverseError):
        rsau.RSAPrivKey.from_primes(61, 53, 3)


def test_bytes_roundtrip(keypair):
    public, private = keypair
    payload = b"Hi there!"[:public.bsize - 1]
    with pytest.warns(RuntimeWarning):
        c = rsau.encrypt_bytes(public, payload)
    with pytest.warns(RuntimeWarning):
        assert rsau.decrypt_bytes(private, c) == payload


def test_bytes_too_long(textbook):
    with pytest.warns(RuntimeWarning), pytest.raises(InvalidInputError):
        rsau.encrypt_bytes(textbook.pub, b"abc")
    with pytest.warns(RuntimeWarning), pytest.raises(InvalidInputError):
        # 2 bytes fit the length but 0xFFFF is above the modulus.
        rsau.encrypt_bytes(textbook.pub, b"\xff\xff")


@pytest.mark.parametrize("number,length,expected", [(0, 1, b"\x00"), (65, 2, b"\x00A"), (2790, 2, b"\x0a\xe6"),
                                                    (2**64 - 1, 8, b"\xff" * 8)])
def test_integer_marshalling(number, length, expected):
    assert rsau.integer_to_bytes(number, length) == expected
    assert rsau.bytes_to_integer(expected) == number


def test_generate_rounds_keyword_only(mocker):
    mocker.patch("textrsa.keygen.generate_key_pair", return_value=((3233, 17), (3233, 2753)))
    with pytest.raises(TypeError):
        rsau.RSAPrivKey.generate(16, 17, 5)  # pylint: disable=too-many-function-args
    with pytest.raises(TypeError):
        rsau.generate_keypair(16, 17, 5)  # pylint: disable=too-many-function-args
    pair = rsau.generate_keypair(16, 17, rounds=5)
    assert pair.public == rsau.RSAPubKey(3233, 17)
    textrsa.keygen.generate_key_pair.assert_called_once_with(16, 17, rounds=5, rng=None)


def test_bytes_leading_zeros_dropped(textbook):
    with pytest.warns(RuntimeWarning):
        c = rsau.encrypt_bytes(textbook.pub, b"\x00A")
    assert c == 2790
    with pytest.warns(RuntimeWarning):
        assert rsau.decrypt_bytes(textbook, c) == b"A"
