"""Provides the textbook RSA primitives, encryption and decryption.

Handles the key classes built from the key generation module, and a couple of supporting functions to marshal short
byte strings into a single message representative.

Typical usage example:

    pair = generate_keypair(1024)
    c = pair.public.encrypt(65)
    m = pair.private.decrypt(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from typing import NamedTuple
import warnings

from textrsa import keygen
from textrsa.errors import InvalidInputError


class RSAKey:
    """The overall RSA key class implementation.

    Holds the components strictly mandatory in both a public and a private key. Keys are read-only once built.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
        bsize: The length of the modulus in bytes.
    """

    def __init__(self, mod: int, expo: int) -> None:
        if mod < 2:
            raise InvalidInputError("Modulus must be at least 2.")
        if expo < 1:
            raise InvalidInputError("Exponent must be positive.")
        self._mod = mod
        self._expo = expo

    @property
    def mod(self) -> int:
        return self._mod

    @property
    def expo(self) -> int:
        return self._expo

    @property
    def bsize(self) -> int:
        return (self._mod.bit_length() + 7) // 8

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation. (Encrypt/Decrypt)

        Args:
            message: The message representative.

        Returns:
            `message ** expo mod mod`.

        Raises:
            InvalidInputError: If the message is out of range for the current key.
        """
        if not 0 <= message < self._mod:
            raise InvalidInputError("Message representative must be in range [0, mod-1]")
        return pow(message, self._expo, self._mod)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self._mod, self._expo) == (other._mod, other._expo)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._mod, self._expo))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mod=<{self._mod.bit_length()} bits>)"


class RSAPubKey(RSAKey):
    """Public key, consisting solely of a modulus and the public exponent."""

    def encrypt(self, message: int) -> int:
        """Use the public key to encrypt the message.

        Args:
            message: The plaintext, in range `[0, mod)`.

        Returns:
            The ciphertext.
        """
        return self.c_rsa(message)


class RSAPrivKey(RSAKey):
    """RSA Private Key class implementation.

    Holds the private exponent and exposes its connected public key.

    Attributes:
        mod: The modulus of the keypair.
        expo: The private exponent of the key.
        pub: The public key of the key.
    """

    def __init__(self, mod: int, pub_exp: int, priv_exp: int) -> None:
        """Initialize the RSA Private Key.

        Args:
            mod: The modulus of the keypair.
            pub_exp: The public exponent of the key.
            priv_exp: The private exponent of the key.
        """
        super().__init__(mod, priv_exp)
        self._pub = RSAPubKey(mod, pub_exp)

    @property
    def pub(self) -> RSAPubKey:
        return self._pub

    def decrypt(self, ciphertext: int) -> int:
        """Decrypts the ciphertext using the private key.

        Args:
            ciphertext: The ciphertext, in range `[0, mod)`.

        Returns:
            The plaintext.
        """
        return self.c_rsa(ciphertext)

    @classmethod
    def generate(cls,
                 size: int = keygen.DEFAULT_KEY_SIZE,
                 pub_exp: int | None = keygen.DEFAULT_EXPONENT,
                 *,
                 rounds: int = keygen.DEFAULT_ROUNDS,
                 rng: keygen.RandomSource | None = None) -> "RSAPrivKey":
        """Generates an RSA Private Key, and it's respective Public Key.

        Args:
            size: The size of the RSA modulus in bits.
            pub_exp: The preferred public exponent, see `keygen.generate_key_pair`.
            rounds: Miller-Rabin rounds per prime candidate.
            rng: Random source for the generation.

        Returns:
            A new generated RSA Private Key.
        """
        (n, pub), (_, d) = keygen.generate_key_pair(size, pub_exp, rounds=rounds, rng=rng)
        return cls(n, pub, d)

    @classmethod
    def from_primes(cls, p: int, q: int, pub_exp: int = keygen.DEFAULT_EXPONENT) -> "RSAPrivKey":
        """Builds the key for known primes and public exponent, see `keygen.derive_key_pair`."""
        (n, pub), (_, d) = keygen.derive_key_pair(p, q, pub_exp)
        return cls(n, pub, d)


class KeyPair(NamedTuple):
    """A public key and the private key it belongs to."""
    public: RSAPubKey
    private: RSAPrivKey


def generate_keypair(size: int = keygen.DEFAULT_KEY_SIZE,
                     pub_exp: int | None = keygen.DEFAULT_EXPONENT,
                     *,
                     rounds: int = keygen.DEFAULT_ROUNDS,
                     rng: keygen.RandomSource | None = None) -> KeyPair:
    """Generates a fresh key pair. Arguments as for `RSAPrivKey.generate`, `rounds` and `rng` keyword-only."""
    priv = RSAPrivKey.generate(size, pub_exp, rounds=rounds, rng=rng)
    return KeyPair(priv.pub, priv)


def encrypt(public: RSAPubKey, message: int) -> int:
    """Computes `message ** e mod n`."""
    return public.encrypt(message)


def decrypt(private: RSAPrivKey, ciphertext: int) -> int:
    """Computes `ciphertext ** d mod n`."""
    return private.decrypt(ciphertext)


def encrypt_bytes(public: RSAPubKey, data: bytes) -> int:
    """Encrypts a short byte string as a single message representative.

    Warning! Textbook RSA without padding is deterministic and malleable.

    Args:
        data: The bytes to encrypt. Their big-endian value has to be below the modulus.

    Returns:
        The ciphertext.

    Raises:
        InvalidInputError: If `data` is too long for the key.
    """
    warnings.warn("Textbook RSA is unsecure! Please use with care.", RuntimeWarning)
    if len(data) > public.bsize:
        raise InvalidInputError("Message too long for the key, chunking is not supported.")
    return public.encrypt(bytes_to_integer(data))


def decrypt_bytes(private: RSAPrivKey, ciphertext: int) -> bytes:
    """Reverses `encrypt_bytes`.

    Leading zero bytes of the original data do not survive the integer marshalling.
    """
    warnings.warn("Textbook RSA is unsecure! Please use with care.", RuntimeWarning)
    payload = private.decrypt(ciphertext)
    return integer_to_bytes(payload, private.bsize).lstrip(b"\x00")


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer, big-endian and unsigned.

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int) -> bytes:
    """Converts an integer to a fixed-length byte representation.

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string.

    Returns:
        The representative bytes. (AKA Octet String)
    """
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)
