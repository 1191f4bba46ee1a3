#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: RSA_manager.py
    Author: Alex Biddle

    Description:
        Manages the server's RSA-1024 key pair and the RSA side of the shared
        secret exchange. Generates the per-instance key pair, encodes and parses
        X.509 SubjectPublicKeyInfo (DER) public keys, and decrypts the client's
        PKCS#1 v1.5 encrypted shared secret into an AES SharedSecret.

        Nothing in here keeps state between calls; every operation builds its
        own cryptographic context, so calls from concurrent connections never
        share one.
"""

import typing
from dataclasses import dataclass
from cryptography.hazmat.primitives.asymmetric import rsa, padding
from cryptography.hazmat.primitives import serialization
from loginhandshake.encryption.AES_manager import SharedSecret
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.handlers.sanitization_validation as VALIDATION
import loginhandshake.constants as CONSTANTS



"""
    Server key pair. The public half is sent to clients, the private half never
    leaves the owning process.
"""
@dataclass(frozen=True)
class KeyPair:
    public: rsa.RSAPublicKey
    private: rsa.RSAPrivateKey



class RSAManager:

    """
        Generate a fresh RSA key pair with the fixed modulus length.

        @return KeyPair: new public/private key pair.
        @ensures key_size == CONSTANTS.RSA_LENGTH and exponent == 65537
        @raises HandshakeError(FATAL) if the provider cannot generate RSA keys.
    """
    @staticmethod
    def generate_key_pair() -> KeyPair:
        try:
            private_key = rsa.generate_private_key(public_exponent=CONSTANTS.RSA_PUBLIC_EXPONENT, key_size=CONSTANTS.RSA_LENGTH)
            return KeyPair(public=private_key.public_key(), private=private_key)

        except Exception as e:
            # Only happens on a host without working RSA support
            raise HandshakeError(ApplicationCodes.RSA_KEY_GENERATION_ERROR, Severity.FATAL, "Failed to generate RSA key pair", "key_pair") from e



    """
        Encode a public key in its standard X.509 SubjectPublicKeyInfo DER form.

        @param public_key (RSAPublicKey): key to encode.
        @return bytes: DER encoding.
    """
    @staticmethod
    def encode_public_key(public_key: rsa.RSAPublicKey) -> bytes:

        if not isinstance(public_key, rsa.RSAPublicKey):
            raise HandshakeError(ApplicationCodes.INVALID_PUBLIC_KEY, Severity.CONFIGURATION, "Public key must be an RSA public key", "public_key")

        return public_key.public_bytes(encoding=serialization.Encoding.DER, format=serialization.PublicFormat.SubjectPublicKeyInfo)



    """
        Parse an X.509 SubjectPublicKeyInfo DER buffer into an RSA public key.

        @param der_data (bytes): DER encoded public key.
        @return RSAPublicKey
        @raises HandshakeError(INVALID_PUBLIC_KEY) when the data is malformed or not RSA.
    """
    @staticmethod
    def load_public_key(der_data: bytes) -> rsa.RSAPublicKey:

        der_data = VALIDATION.validate_bytes(der_data, "public_key", allow_empty=False)

        try:
            public_key = serialization.load_der_public_key(der_data)
        except Exception as e:
            raise HandshakeError(ApplicationCodes.INVALID_PUBLIC_KEY, Severity.CONNECTION, "Failed to parse DER public key", "public_key") from e

        if not isinstance(public_key, rsa.RSAPublicKey):
            raise HandshakeError(ApplicationCodes.INVALID_PUBLIC_KEY, Severity.CONNECTION, "Parsed key is not an RSA public key", "public_key")

        return public_key



    """
        Decrypt the client's encrypted shared secret with the server private key.

        @param private_key (RSAPrivateKey): private half of the server key pair.
        @param encrypted_secret (bytes): RSA PKCS#1 v1.5 ciphertext sent by the client.
        @return SharedSecret: decrypted key material, any non-empty length.
        @raises HandshakeError(RSA_DECRYPT_ERROR, CONNECTION) on malformed ciphertext
                or padding the provider reports as bad.
        @raises HandshakeError(INVALID_SHARED_SECRET, CONNECTION) if the plaintext is empty.

        Providers with PKCS#1 v1.5 implicit rejection return unrelated bytes
        instead of raising for ciphertext made with another key or tampered in
        transit. Such a secret is never the client's, so the encrypted verify
        token decrypted the same way will not match; the protocol layer's token
        comparison is what rejects the connection.
    """
    @staticmethod
    def decrypt_shared_key(private_key: rsa.RSAPrivateKey, encrypted_secret: bytes) -> SharedSecret:
        try:
            if not isinstance(private_key, rsa.RSAPrivateKey):
                raise HandshakeError(ApplicationCodes.INVALID_PRIVATE_KEY, Severity.CONFIGURATION, "Private key must be an RSA private key", "private_key")

            encrypted_secret = VALIDATION.validate_bytes(encrypted_secret, "encrypted_secret", allow_empty=False)

            try:
                secret = private_key.decrypt(encrypted_secret, padding.PKCS1v15())
            except ValueError as e:
                raise HandshakeError(ApplicationCodes.RSA_DECRYPT_ERROR, Severity.CONNECTION, "Failed to decrypt shared secret", "encrypted_secret") from e

            return SharedSecret(secret)

        except HandshakeError:
            raise
        except Exception as e:
            raise HandshakeError(ApplicationCodes.RSA_DECRYPT_ERROR, Severity.CONNECTION, "Unexpected shared secret decryption failure", "encrypted_secret") from e



    """
        Encrypt a shared secret for the server, as the client side of the exchange does.

        @param public_key (RSAPublicKey): server public key.
        @param secret (SharedSecret | bytes): secret to wrap.
        @return bytes: RSA PKCS#1 v1.5 ciphertext.
    """
    @staticmethod
    def encrypt_shared_key(public_key: rsa.RSAPublicKey, secret: typing.Union[SharedSecret, bytes]) -> bytes:
        try:
            if not isinstance(public_key, rsa.RSAPublicKey):
                raise HandshakeError(ApplicationCodes.INVALID_PUBLIC_KEY, Severity.CONFIGURATION, "Public key must be an RSA public key", "public_key")

            if isinstance(secret, SharedSecret):
                secret = secret.encoded

            secret = VALIDATION.validate_bytes(secret, "shared_secret")

            return public_key.encrypt(secret, padding.PKCS1v15())

        except HandshakeError:
            raise
        except Exception as e:
            raise HandshakeError(ApplicationCodes.RSA_ENCRYPT_ERROR, Severity.CONNECTION, "Failed to encrypt shared secret", "shared_secret") from e
