#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: TestAESManager.py
    Author: Alex Biddle

    Description:
        Test suite for SharedSecret and AESManager. Verifies shared secret
        validation, that secrets stay out of repr(), the AES/CFB8 stream
        ciphers built from a secret, and shared secret generation from an
        injected random source.
"""

import random
import unittest
from loginhandshake.encryption.AES_manager import AESManager, SharedSecret
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity


class TestAESManager(unittest.TestCase):

    PLAINTEXT = b"login-success-packet"
    KEY_16 = bytes(range(16))

    """
        Any non-empty secret is accepted and frozen to bytes.
    """
    def test_shared_secret_accepts_any_length(self):

        for length in (1, 5, 16, 24, 32, 64):
            secret = SharedSecret(bytearray(b"\x07" * length))
            self.assertIsInstance(secret.encoded, bytes)
            self.assertEqual(length, len(secret))
            self.assertEqual("AES", secret.algorithm)

    """
        An empty secret raises INVALID_SHARED_SECRET / CONNECTION.
    """
    def test_shared_secret_rejects_empty(self):

        with self.assertRaises(HandshakeError) as cm:
            SharedSecret(b"")

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_SHARED_SECRET)
        self.assertEqual(cm.exception.severity, Severity.CONNECTION)

        with self.assertRaises(HandshakeError) as cm:
            SharedSecret("0123456789abcdef")  # type: ignore[arg-type]
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)

    """
        repr() must never leak the key bytes.
    """
    def test_shared_secret_repr_hides_key(self):

        secret = SharedSecret(b"\xab" * 16)
        self.assertNotIn("xab", repr(secret))
        self.assertNotIn("encoded", repr(secret))

    """
        The encryptor and decryptor of one secret are inverse streams.
    """
    def test_create_cipher_round_trip(self):

        encryptor, decryptor = SharedSecret(self.KEY_16).create_cipher()

        first = encryptor.update(self.PLAINTEXT)
        second = encryptor.update(self.PLAINTEXT)

        self.assertNotEqual(self.PLAINTEXT, first)
        self.assertEqual(len(self.PLAINTEXT), len(first))

        # CFB8 carries state across packets
        self.assertNotEqual(first, second)

        self.assertEqual(self.PLAINTEXT, decryptor.update(first))
        self.assertEqual(self.PLAINTEXT, decryptor.update(second))

    """
        Both sides of a connection derive identical streams from the same secret.
    """
    def test_create_cipher_is_symmetric_between_peers(self):

        server_encryptor, _ = SharedSecret(self.KEY_16).create_cipher()
        _, client_decryptor = SharedSecret(self.KEY_16).create_cipher()

        self.assertEqual(self.PLAINTEXT, client_decryptor.update(server_encryptor.update(self.PLAINTEXT)))

    """
        The stream cipher uses the secret as IV and so needs exactly 16 bytes.
    """
    def test_create_cipher_requires_16_bytes(self):

        for length in (5, 20, 32):
            with self.assertRaises(HandshakeError) as cm:
                SharedSecret(b"\x01" * length).create_cipher()

            self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_SHARED_SECRET)

    """
        generate_shared_secret draws 16 bytes from the injected source.
    """
    def test_generate_shared_secret_deterministic_source(self):

        first = AESManager.generate_shared_secret(random.Random(1234))
        second = AESManager.generate_shared_secret(random.Random(1234))

        self.assertEqual(16, len(first))
        self.assertEqual(first, second)
        self.assertEqual(random.Random(1234).randbytes(16), first.encoded)

    def test_generate_shared_secret_system_source(self):

        source = random.SystemRandom()
        self.assertNotEqual(AESManager.generate_shared_secret(source), AESManager.generate_shared_secret(source))

    """
        A source without randbytes() is a configuration error.
    """
    def test_generate_shared_secret_rejects_invalid_source(self):

        with self.assertRaises(HandshakeError) as cm:
            AESManager.generate_shared_secret(object())

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_RANDOM_SOURCE)
        self.assertEqual(cm.exception.severity, Severity.CONFIGURATION)


if __name__ == "__main__":
    unittest.main()
