#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testSignatureManager.py
    Author:
    Date:

    Description:

        Test suite for the canonical client key form, client key verification
        against a throwaway test trust anchor, and signed nonce verification.
        Covers the expiry boundary (equal counts as expired), single byte
        tampering of keys, signatures, nonces and salts, and the errors raised
        for unusable keys.
"""

import base64
import unittest
from unittest import mock
from datetime import datetime, timezone, timedelta
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec, rsa, padding
from cryptography.hazmat.primitives import hashes
from loginhandshake.encryption import signature_manager, trust_anchor
from loginhandshake.encryption.signature_manager import to_signable, verify_client_key, verify_signed_nonce, sign_client_key, sign_nonce
from loginhandshake.encryption.trust_anchor import TrustAnchor
from loginhandshake.encryption.RSA_manager import RSAManager
from loginhandshake.handlers.packet_handler import ClientPublicKey
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity


def _flip(data: bytes, index: int = 0) -> bytes:
    return data[:index] + bytes([data[index] ^ 0x01]) + data[index + 1:]


class TestCanonicalForm(unittest.TestCase):

    EXPIRY = datetime(1970, 1, 1, 0, 0, 1, 500000, tzinfo=timezone.utc)

    """
        Layout: millis, begin marker, 76 char lines, end marker, trailing newline.
    """
    def test_layout(self):

        key = bytes(200)
        text = to_signable(key, self.EXPIRY).decode("ascii")

        encoded = base64.b64encode(key).decode("ascii")
        expected = (
            "1500-----BEGIN RSA PUBLIC KEY-----\n"
            + encoded[0:76] + "\n"
            + encoded[76:152] + "\n"
            + encoded[152:228] + "\n"
            + encoded[228:] + "\n"
            + "-----END RSA PUBLIC KEY-----\n"
        )

        self.assertEqual(expected, text)
        self.assertNotIn("\r", text)

    """
        A real 1024 bit key wraps into full 76 character lines plus a remainder.
    """
    def test_wrapping_of_real_key(self):

        key_der = RSAManager.encode_public_key(RSAManager.generate_key_pair().public)
        lines = to_signable(key_der, self.EXPIRY).decode("ascii").split("\n")

        self.assertTrue(lines[0].endswith("-----BEGIN RSA PUBLIC KEY-----"))
        self.assertEqual("-----END RSA PUBLIC KEY-----", lines[-2])
        self.assertEqual("", lines[-1])

        body = lines[1:-2]
        self.assertTrue(all(len(line) == 76 for line in body[:-1]))
        self.assertLessEqual(len(body[-1]), 76)
        self.assertEqual(key_der, base64.b64decode("".join(body)))

    """
        An exact multiple of 76 characters leaves no empty line behind.
    """
    def test_exact_line_multiple(self):

        key = bytes(57)  # 76 base64 characters
        text = to_signable(key, self.EXPIRY).decode("ascii")

        self.assertEqual("1500-----BEGIN RSA PUBLIC KEY-----\n" + "A" * 76 + "\n-----END RSA PUBLIC KEY-----\n", text)

    """
        Expiry is rendered as epoch milliseconds; naive datetimes count as UTC.
    """
    def test_expiry_rendering(self):

        aware = datetime(2022, 6, 1, tzinfo=timezone.utc)
        naive = datetime(2022, 6, 1)
        shifted = datetime(2022, 6, 1, 2, tzinfo=timezone(timedelta(hours=2)))

        self.assertTrue(to_signable(b"k", aware).startswith(b"1654041600000-----BEGIN"))
        self.assertEqual(to_signable(b"k", aware), to_signable(b"k", naive))
        self.assertEqual(to_signable(b"k", aware), to_signable(b"k", shifted))

        # Sub-millisecond values are floored, also before the epoch
        before_epoch = datetime(1969, 12, 31, 23, 59, 59, 999500, tzinfo=timezone.utc)
        self.assertTrue(to_signable(b"k", before_epoch).startswith(b"-1-----BEGIN"))



class TestClientKeyVerification(unittest.TestCase):

    EXPIRY = datetime(2030, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    ONE_MS = timedelta(milliseconds=1)

    """
        A test authority plays the trust anchor; the client has its own key.
    """
    @classmethod
    def setUpClass(cls) -> None:
        cls.authority = RSAManager.generate_key_pair()
        cls.anchor = TrustAnchor(cls.authority.public)
        cls.client_der = RSAManager.encode_public_key(RSAManager.generate_key_pair().public)
        cls.signature = sign_client_key(cls.authority.private, cls.client_der, cls.EXPIRY)

    def _client_key(self, key=None, signature=None) -> ClientPublicKey:
        return ClientPublicKey(key if key is not None else self.client_der, self.EXPIRY, signature if signature is not None else self.signature)

    """
        End to end: valid just before expiry, invalid at expiry, invalid with a flipped bit.
    """
    def test_end_to_end_scenario(self):

        self.assertTrue(verify_client_key(self._client_key(), self.EXPIRY - self.ONE_MS, self.anchor))
        self.assertFalse(verify_client_key(self._client_key(), self.EXPIRY, self.anchor))
        self.assertFalse(verify_client_key(self._client_key(signature=_flip(self.signature, 5)), self.EXPIRY - self.ONE_MS, self.anchor))

    """
        Any time after expiry is rejected as well.
    """
    def test_after_expiry(self):

        self.assertFalse(verify_client_key(self._client_key(), self.EXPIRY + timedelta(days=1), self.anchor))

    """
        Expired keys are rejected before any signature work.
    """
    def test_expired_key_skips_signature_check(self):

        with mock.patch.object(signature_manager, "_verify_pkcs1v15") as verifier:
            self.assertFalse(verify_client_key(self._client_key(), self.EXPIRY, self.anchor))

        verifier.assert_not_called()

    """
        Flipping any byte of the key or the signature fails verification.
    """
    def test_tampering_fails(self):

        at = self.EXPIRY - timedelta(hours=1)

        for index in (0, len(self.client_der) // 2, len(self.client_der) - 1):
            self.assertFalse(verify_client_key(self._client_key(key=_flip(self.client_der, index)), at, self.anchor))

        for index in (0, len(self.signature) // 2, len(self.signature) - 1):
            self.assertFalse(verify_client_key(self._client_key(signature=_flip(self.signature, index)), at, self.anchor))

        self.assertFalse(verify_client_key(self._client_key(signature=b""), at, self.anchor))

    """
        The signature covers the expiry too; a different expiry fails.
    """
    def test_different_expiry_fails(self):

        moved = ClientPublicKey(self.client_der, self.EXPIRY + timedelta(days=30), self.signature)
        self.assertFalse(verify_client_key(moved, self.EXPIRY, self.anchor))

    """
        A key signed by someone other than the trust anchor is rejected.
    """
    def test_other_authority_fails(self):

        other_anchor = TrustAnchor(RSAManager.generate_key_pair().public)
        self.assertFalse(verify_client_key(self._client_key(), self.EXPIRY - self.ONE_MS, other_anchor))

    """
        Without an explicit anchor the process-wide one is used.
    """
    def test_uses_process_trust_anchor(self):

        with mock.patch.object(trust_anchor, "_ACTIVE_TRUST_ANCHOR", self.anchor):
            self.assertTrue(verify_client_key(self._client_key(), self.EXPIRY - self.ONE_MS))

        with mock.patch.object(trust_anchor, "_ACTIVE_TRUST_ANCHOR", None):
            with self.assertRaises(HandshakeError) as cm:
                verify_client_key(self._client_key(), self.EXPIRY - self.ONE_MS)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.TRUST_ANCHOR_NOT_LOADED)

    """
        Environmental problems raise instead of returning False.
    """
    def test_errors_raise(self):

        with self.assertRaises(HandshakeError) as cm:
            verify_client_key("not-a-client-key", self.EXPIRY, self.anchor)  # type: ignore[arg-type]
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)

        with self.assertRaises(HandshakeError) as cm:
            verify_client_key(self._client_key(), "yesterday", self.anchor)  # type: ignore[arg-type]
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TIMESTAMP)

        engineless = mock.Mock(spec=rsa.RSAPublicKey)
        engineless.verify.side_effect = UnsupportedAlgorithm("no sha1")

        with self.assertRaises(HandshakeError) as cm:
            verify_client_key(self._client_key(), self.EXPIRY - self.ONE_MS, TrustAnchor(engineless))
        self.assertEqual(cm.exception.application_code, ApplicationCodes.SIGNATURE_ENGINE_ERROR)
        self.assertEqual(cm.exception.severity, Severity.CONFIGURATION)



class TestSignedNonceVerification(unittest.TestCase):

    NONCE = b"\x10\x20\x30\x40\x50\x60\x70\x80"
    SALT = -4242424242424242

    @classmethod
    def setUpClass(cls) -> None:
        cls.client = RSAManager.generate_key_pair()
        cls.signature = sign_nonce(cls.client.private, cls.NONCE, cls.SALT)

    """
        A correct signature over nonce || salt verifies.
    """
    def test_valid_signature(self):

        self.assertTrue(verify_signed_nonce(self.NONCE, self.client.public, self.SALT, self.signature))

    """
        Salt, nonce or signature changes all fail.
    """
    def test_tampering_fails(self):

        self.assertFalse(verify_signed_nonce(self.NONCE, self.client.public, self.SALT + 1, self.signature))
        self.assertFalse(verify_signed_nonce(self.NONCE, self.client.public, self.SALT - 1, self.signature))
        self.assertFalse(verify_signed_nonce(_flip(self.NONCE, 3), self.client.public, self.SALT, self.signature))
        self.assertFalse(verify_signed_nonce(self.NONCE + b"\x00", self.client.public, self.SALT, self.signature))
        self.assertFalse(verify_signed_nonce(self.NONCE, self.client.public, self.SALT, _flip(self.signature, 10)))

    """
        Another client's key does not verify the signature.
    """
    def test_wrong_key_fails(self):

        other = RSAManager.generate_key_pair()
        self.assertFalse(verify_signed_nonce(self.NONCE, other.public, self.SALT, self.signature))

    """
        The full signed 64-bit range is usable, and the salt is 8 bytes big-endian.
    """
    def test_salt_bounds(self):

        for salt in (0, -1, 2 ** 63 - 1, -(2 ** 63)):
            signature = sign_nonce(self.client.private, b"", salt)
            self.assertTrue(verify_signed_nonce(b"", self.client.public, salt, signature))

        # Signed data is the nonce followed by the salt as 8 big-endian bytes
        raw = self.client.private.sign(b"abc" + b"\xff" * 7 + b"\xfe", padding.PKCS1v15(), hashes.SHA256())
        self.assertTrue(verify_signed_nonce(b"abc", self.client.public, -2, raw))

        with self.assertRaises(HandshakeError) as cm:
            verify_signed_nonce(self.NONCE, self.client.public, 2 ** 63, self.signature)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_SALT)

        with self.assertRaises(HandshakeError) as cm:
            verify_signed_nonce(self.NONCE, self.client.public, True, self.signature)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_SALT)

    """
        Non-RSA keys cannot run SHA256withRSA and raise.
    """
    def test_non_rsa_key_raises(self):

        ec_key = ec.generate_private_key(ec.SECP256R1()).public_key()

        with self.assertRaises(HandshakeError) as cm:
            verify_signed_nonce(self.NONCE, ec_key, self.SALT, self.signature)  # type: ignore[arg-type]

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_PUBLIC_KEY)
        self.assertEqual(cm.exception.severity, Severity.CONFIGURATION)


if __name__ == "__main__":
    unittest.main()
