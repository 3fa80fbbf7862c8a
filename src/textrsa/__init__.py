"""Textbook RSA from elementary number theory, in an Academic Sense.

Provides the Extended Euclidean Algorithm, Miller-Rabin primality testing, key pair generation and the textbook RSA
encryption and decryption primitives. Not intended for protecting anything: there is no padding and no side-channel
resistance.

Typical usage example:

    pair = generate_keypair(1024)
    c = encrypt(pair.public, 65)
    m = decrypt(pair.private, c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from textrsa.arith import eea
from textrsa.arith import gcd
from textrsa.arith import mod_inverse
from textrsa.errors import GenerationExhaustedError
from textrsa.errors import InvalidInputError
from textrsa.errors import NoInverseError
from textrsa.errors import TextRSAError
from textrsa.keygen import check_prime
from textrsa.keygen import derive_key_pair
from textrsa.keygen import generate_key_pair
from textrsa.keygen import generate_primes
from textrsa.keygen import miller_rabin
from textrsa.rsa import decrypt
from textrsa.rsa import encrypt
from textrsa.rsa import generate_keypair
from textrsa.rsa import KeyPair
from textrsa.rsa import RSAPrivKey
from textrsa.rsa import RSAPubKey

__version__ = "0.1.0"
__all__ = [
    "KeyPair",
    "RSAPrivKey",
    "RSAPubKey",
    "TextRSAError",
    "InvalidInputError",
    "NoInverseError",
    "GenerationExhaustedError",
    "eea",
    "gcd",
    "mod_inverse",
    "miller_rabin",
    "check_prime",
    "generate_primes",
    "derive_key_pair",
    "generate_key_pair",
    "generate_keypair",
    "encrypt",
    "decrypt",
]
