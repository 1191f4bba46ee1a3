#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testRSAManager.py
    Author:
    Date:

    Description:

        Test suite for RSAManager. Covers key pair generation with the fixed
        modulus, DER encoding and parsing of public keys, PKCS#1 v1.5 shared
        secret decryption round trips, and the HandshakeError codes and
        severities raised for bad ciphertext and bad keys.
"""

import unittest
from cryptography.hazmat.primitives.asymmetric import rsa, ec, padding
from cryptography.hazmat.primitives import serialization
from loginhandshake.encryption.RSA_manager import RSAManager, KeyPair
from loginhandshake.encryption.AES_manager import SharedSecret
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.constants as CONSTANTS


class TestRSAManager(unittest.TestCase):

    SECRET_16 = bytes(range(16))
    SECRET_32 = b"\x5a" * 32

    """
        One server key pair is shared by the whole suite; generation is slow.
    """
    @classmethod
    def setUpClass(cls) -> None:
        cls.key_pair = RSAManager.generate_key_pair()

    """
        Generated key pairs use the fixed modulus and exponent.
    """
    def test_generate_key_pair_properties(self):

        self.assertIsInstance(self.key_pair, KeyPair)
        self.assertIsInstance(self.key_pair.public, rsa.RSAPublicKey)
        self.assertIsInstance(self.key_pair.private, rsa.RSAPrivateKey)

        self.assertEqual(CONSTANTS.RSA_LENGTH, self.key_pair.public.key_size)
        self.assertEqual(CONSTANTS.RSA_PUBLIC_EXPONENT, self.key_pair.public.public_numbers().e)

        # The public half really belongs to the private half
        self.assertEqual(self.key_pair.private.public_key().public_numbers(), self.key_pair.public.public_numbers())

    """
        Public and private encodings differ, and two key pairs never match.
    """
    def test_generate_key_pair_distinct(self):

        public_der = RSAManager.encode_public_key(self.key_pair.public)
        private_der = self.key_pair.private.private_bytes(serialization.Encoding.DER, serialization.PrivateFormat.PKCS8, serialization.NoEncryption())
        self.assertNotEqual(public_der, private_der)

        other = RSAManager.generate_key_pair()
        self.assertNotEqual(public_der, RSAManager.encode_public_key(other.public))

    """
        The SubjectPublicKeyInfo DER of a 1024 bit key is 162 bytes and parses back.
    """
    def test_encode_and_load_public_key(self):

        der = RSAManager.encode_public_key(self.key_pair.public)
        self.assertEqual(162, len(der))

        loaded = RSAManager.load_public_key(der)
        self.assertEqual(self.key_pair.public.public_numbers(), loaded.public_numbers())

    """
        load_public_key rejects garbage and non-RSA keys with INVALID_PUBLIC_KEY.
    """
    def test_load_public_key_rejects_invalid(self):

        with self.assertRaises(HandshakeError) as cm:
            RSAManager.load_public_key(b"\x30\x03\x02\x01\x00")
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_PUBLIC_KEY)

        ec_der = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo)
        with self.assertRaises(HandshakeError) as cm:
            RSAManager.load_public_key(ec_der)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_PUBLIC_KEY)

        with self.assertRaises(HandshakeError) as cm:
            RSAManager.load_public_key(b"")
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_LENGTH)

    """
        encode_public_key only accepts RSA public keys.
    """
    def test_encode_public_key_rejects_private_key(self):

        with self.assertRaises(HandshakeError) as cm:
            RSAManager.encode_public_key(self.key_pair.private)  # type: ignore[arg-type]

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_PUBLIC_KEY)
        self.assertEqual(cm.exception.severity, Severity.CONFIGURATION)

    """
        decrypt(priv, encrypt(pub, s)) == s for 16 and 32 byte secrets.
    """
    def test_decrypt_shared_key_round_trip(self):

        for secret in (self.SECRET_16, self.SECRET_32):
            encrypted = RSAManager.encrypt_shared_key(self.key_pair.public, secret)
            self.assertEqual(CONSTANTS.RSA_LENGTH // 8, len(encrypted))

            shared = RSAManager.decrypt_shared_key(self.key_pair.private, encrypted)
            self.assertIsInstance(shared, SharedSecret)
            self.assertEqual(secret, shared.encoded)
            self.assertEqual("AES", shared.algorithm)

    """
        Ciphertext produced by any PKCS#1 v1.5 encoder decrypts, not just ours.
    """
    def test_decrypt_shared_key_accepts_foreign_ciphertext(self):

        encrypted = self.key_pair.public.encrypt(self.SECRET_16, padding.PKCS1v15())
        shared = RSAManager.decrypt_shared_key(self.key_pair.private, bytearray(encrypted))

        self.assertEqual(self.SECRET_16, shared.encoded)

    """
        A SharedSecret can be encrypted directly.
    """
    def test_encrypt_shared_key_accepts_shared_secret(self):

        encrypted = RSAManager.encrypt_shared_key(self.key_pair.public, SharedSecret(self.SECRET_16))
        self.assertEqual(self.SECRET_16, RSAManager.decrypt_shared_key(self.key_pair.private, encrypted).encoded)

    """
        Malformed ciphertext raises RSA_DECRYPT_ERROR / CONNECTION.
    """
    def test_decrypt_shared_key_malformed_ciphertext(self):

        with self.assertRaises(HandshakeError) as cm:
            RSAManager.decrypt_shared_key(self.key_pair.private, b"\x01" * 10)

        exc = cm.exception
        self.assertEqual(exc.application_code, ApplicationCodes.RSA_DECRYPT_ERROR)
        self.assertEqual(exc.severity, Severity.CONNECTION)
        self.assertEqual(exc.field, "encrypted_secret")

    """
        Empty or non-bytes ciphertext is rejected before decryption.
    """
    def test_decrypt_shared_key_rejects_invalid_input(self):

        with self.assertRaises(HandshakeError) as cm:
            RSAManager.decrypt_shared_key(self.key_pair.private, b"")
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_LENGTH)

        with self.assertRaises(HandshakeError) as cm:
            RSAManager.decrypt_shared_key(self.key_pair.private, "not-bytes")  # type: ignore[arg-type]
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)

        with self.assertRaises(HandshakeError) as cm:
            RSAManager.decrypt_shared_key(self.key_pair.public, b"\x00" * 128)  # type: ignore[arg-type]
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_PRIVATE_KEY)

    """
        decrypt(priv, encrypt(pub, s)) == s for any non-empty length, not only AES key sizes.
    """
    def test_decrypt_shared_key_round_trip_any_length(self):

        for length in (1, 8, 15, 17, 20, 64):
            secret = bytes(range(length))
            encrypted = RSAManager.encrypt_shared_key(self.key_pair.public, secret)

            shared = RSAManager.decrypt_shared_key(self.key_pair.private, encrypted)
            self.assertEqual(secret, shared.encoded, f"length {length}")

    """
        Ciphertext for another key either fails as a connection error or, under
        implicit rejection, decrypts to bytes that are not the client's secret.
        The verify token decrypted with the same key then fails the comparison.
    """
    def test_decrypt_shared_key_wrong_key(self):

        other = RSAManager.generate_key_pair()
        verify_token = b"\x11\x22\x33\x44"

        for _ in range(20):
            encrypted_secret = RSAManager.encrypt_shared_key(self.key_pair.public, self.SECRET_16)
            encrypted_token = RSAManager.encrypt_shared_key(self.key_pair.public, verify_token)

            try:
                shared = RSAManager.decrypt_shared_key(other.private, encrypted_secret)
            except HandshakeError as exc:
                self.assertEqual(exc.severity, Severity.CONNECTION)
                self.assertIn(exc.application_code, (ApplicationCodes.RSA_DECRYPT_ERROR, ApplicationCodes.INVALID_SHARED_SECRET))
                continue

            self.assertNotEqual(self.SECRET_16, shared.encoded)

            try:
                token = RSAManager.decrypt_shared_key(other.private, encrypted_token).encoded
            except HandshakeError:
                continue
            self.assertNotEqual(verify_token, token)

    """
        A secret that decrypts to nothing is rejected as a whole.
    """
    def test_decrypt_shared_key_rejects_empty_plaintext(self):

        encrypted = self.key_pair.public.encrypt(b"", padding.PKCS1v15())

        with self.assertRaises(HandshakeError) as cm:
            RSAManager.decrypt_shared_key(self.key_pair.private, encrypted)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_SHARED_SECRET)
        self.assertEqual(cm.exception.severity, Severity.CONNECTION)


if __name__ == "__main__":
    unittest.main()
