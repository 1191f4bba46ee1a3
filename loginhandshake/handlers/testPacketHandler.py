#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testPacketHandler.py
    Author:
    Date:

    Description:

        Test suite for the ClientPublicKey record and the shared validation
        helpers it relies on: byte and timestamp normalisation, the strict
        expiry rule, epoch millisecond conversion and salt encoding.
"""

import unittest
from datetime import datetime, timezone, timedelta
from loginhandshake.handlers.packet_handler import ClientPublicKey
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes
from loginhandshake.encryption.RSA_manager import RSAManager
import loginhandshake.handlers.sanitization_validation as VALIDATION


class TestClientPublicKey(unittest.TestCase):

    EXPIRY = datetime(2030, 1, 1, tzinfo=timezone.utc)

    @classmethod
    def setUpClass(cls) -> None:
        cls.public_key = RSAManager.generate_key_pair().public

    """
        Fields are normalised: bytes copies and an aware UTC expiry.
    """
    def test_normalised_fields(self):

        client_key = ClientPublicKey(bytearray(b"\x30\x01"), datetime(2030, 1, 1), bytearray(b"sig"))

        self.assertIsInstance(client_key.key, bytes)
        self.assertIsInstance(client_key.signature, bytes)
        self.assertEqual(self.EXPIRY, client_key.expiry)
        self.assertEqual(timezone.utc, client_key.expiry.tzinfo)
        self.assertEqual(1893456000000, VALIDATION.to_epoch_millis(client_key.expiry))

    """
        Strictly-before rule: equality with expiry counts as expired.
    """
    def test_is_expired_boundary(self):

        client_key = ClientPublicKey(b"\x30", self.EXPIRY, b"")

        self.assertFalse(client_key.is_expired(self.EXPIRY - timedelta(milliseconds=1)))
        self.assertFalse(client_key.is_expired(self.EXPIRY - timedelta(microseconds=1)))
        self.assertTrue(client_key.is_expired(self.EXPIRY))
        self.assertTrue(client_key.is_expired(self.EXPIRY + timedelta(microseconds=1)))

        # Same instant in another zone
        self.assertTrue(client_key.is_expired(datetime(2030, 1, 1, 1, tzinfo=timezone(timedelta(hours=1)))))

    """
        public_key() parses the DER back into the same RSA key.
    """
    def test_public_key_round_trip(self):

        client_key = ClientPublicKey(RSAManager.encode_public_key(self.public_key), self.EXPIRY, b"sig")

        self.assertEqual(self.public_key.public_numbers(), client_key.public_key().public_numbers())

    """
        Invalid fields raise with the field name attached.
    """
    def test_rejects_invalid_fields(self):

        with self.assertRaises(HandshakeError) as cm:
            ClientPublicKey(b"", self.EXPIRY, b"")
        self.assertEqual(cm.exception.field, "client_key")

        with self.assertRaises(HandshakeError) as cm:
            ClientPublicKey(b"\x30", 1893456000000, b"")  # type: ignore[arg-type]
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TIMESTAMP)

        with self.assertRaises(HandshakeError) as cm:
            ClientPublicKey(b"\x30", self.EXPIRY, None)  # type: ignore[arg-type]
        self.assertEqual(cm.exception.field, "signature")

        with self.assertRaises(HandshakeError) as cm:
            ClientPublicKey(b"\x30", self.EXPIRY, b"").public_key()
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_PUBLIC_KEY)



class TestSanitizationValidation(unittest.TestCase):

    def test_epoch_millis(self):

        self.assertEqual(0, VALIDATION.to_epoch_millis(datetime(1970, 1, 1, tzinfo=timezone.utc)))
        self.assertEqual(1, VALIDATION.to_epoch_millis(datetime(1970, 1, 1, 0, 0, 0, 1999, tzinfo=timezone.utc)))
        self.assertEqual(-1, VALIDATION.to_epoch_millis(datetime(1969, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)))

        # Naive values count as UTC
        self.assertEqual(1654041600123, VALIDATION.to_epoch_millis(datetime(2022, 6, 1, 0, 0, 0, 123000)))

    def test_encode_signature_salt(self):

        self.assertEqual(b"\x00" * 7 + b"\x01", VALIDATION.encode_signature_salt(1))
        self.assertEqual(b"\xff" * 8, VALIDATION.encode_signature_salt(-1))
        self.assertEqual(b"\x80" + b"\x00" * 7, VALIDATION.encode_signature_salt(-(2 ** 63)))

        for bad in (2 ** 63, -(2 ** 63) - 1, "1", 1.0, False):
            with self.assertRaises(HandshakeError) as cm:
                VALIDATION.encode_signature_salt(bad)
            self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_SALT)

    def test_validate_bytes(self):

        self.assertEqual(b"ab", VALIDATION.validate_bytes(memoryview(b"ab"), "data"))

        with self.assertRaises(HandshakeError) as cm:
            VALIDATION.validate_bytes([1, 2], "data")
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)

        with self.assertRaises(HandshakeError) as cm:
            VALIDATION.validate_bytes(b"", "data", allow_empty=False)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_LENGTH)


if __name__ == "__main__":
    unittest.main()
