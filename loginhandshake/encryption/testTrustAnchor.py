#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testTrustAnchor.py
    Author:
    Date:

    Description:

        Test suite for the process-wide trust anchor. Each test runs with the
        module state patched back to "not loaded", so initialization can be
        exercised without leaking an anchor into other suites.
"""

import unittest
from unittest import mock
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives import serialization
from loginhandshake.encryption import trust_anchor
from loginhandshake.encryption.trust_anchor import TrustAnchor, initialize_trust_anchor, get_trust_anchor, is_trust_anchor_initialized, read_packaged_trust_anchor
from loginhandshake.encryption.RSA_manager import RSAManager
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.constants as CONSTANTS


class TestTrustAnchor(unittest.TestCase):

    @classmethod
    def setUpClass(cls) -> None:
        cls.authority = RSAManager.generate_key_pair()
        cls.authority_der = RSAManager.encode_public_key(cls.authority.public)

    def setUp(self) -> None:
        patcher = mock.patch.object(trust_anchor, "_ACTIVE_TRUST_ANCHOR", None)
        patcher.start()
        self.addCleanup(patcher.stop)

    """
        Loading from DER makes the anchor available process-wide.
    """
    def test_initialize_from_der(self):

        self.assertFalse(is_trust_anchor_initialized())

        anchor = initialize_trust_anchor(self.authority_der)

        self.assertIsInstance(anchor, TrustAnchor)
        self.assertTrue(is_trust_anchor_initialized())
        self.assertIs(anchor, get_trust_anchor())
        self.assertEqual(self.authority_der, anchor.encoded)

    """
        The anchor is loaded once and never replaced.
    """
    def test_second_initialize_fails(self):

        first = initialize_trust_anchor(self.authority_der)
        other_der = RSAManager.encode_public_key(RSAManager.generate_key_pair().public)

        with self.assertRaises(HandshakeError) as cm:
            initialize_trust_anchor(other_der)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.TRUST_ANCHOR_ALREADY_LOADED)
        self.assertTrue(cm.exception.is_fatal)
        self.assertIs(first, get_trust_anchor())

    """
        Using the anchor before initialization is fatal.
    """
    def test_get_before_initialize(self):

        with self.assertRaises(HandshakeError) as cm:
            get_trust_anchor()

        self.assertEqual(cm.exception.application_code, ApplicationCodes.TRUST_ANCHOR_NOT_LOADED)
        self.assertEqual(cm.exception.severity, Severity.FATAL)

    """
        Malformed or non-RSA key data is a fatal load error and leaves nothing loaded.
    """
    def test_malformed_key_is_fatal(self):

        ec_der = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo)

        for data in (b"\x00\x01\x02", ec_der, self.authority_der[:-10]):
            with self.assertRaises(HandshakeError) as cm:
                initialize_trust_anchor(data)

            self.assertEqual(cm.exception.application_code, ApplicationCodes.TRUST_ANCHOR_LOAD_ERROR)
            self.assertEqual(cm.exception.severity, Severity.FATAL)
            self.assertFalse(is_trust_anchor_initialized())

    """
        A missing packaged resource is a fatal load error.
    """
    def test_missing_resource_is_fatal(self):

        with mock.patch.object(CONSTANTS, "TRUST_ANCHOR_RESOURCE", "resources/does_not_exist.der"):
            with self.assertRaises(HandshakeError) as cm:
                initialize_trust_anchor()

        self.assertEqual(cm.exception.application_code, ApplicationCodes.TRUST_ANCHOR_LOAD_ERROR)
        self.assertEqual(cm.exception.severity, Severity.FATAL)
        self.assertFalse(is_trust_anchor_initialized())

    """
        Without explicit data the packaged resource is read.
    """
    def test_initialize_reads_packaged_resource(self):

        with mock.patch.object(trust_anchor, "read_packaged_trust_anchor", return_value=self.authority_der) as reader:
            anchor = initialize_trust_anchor()

        reader.assert_called_once_with()
        self.assertEqual(self.authority_der, anchor.encoded)

    """
        read_packaged_trust_anchor only wraps errors; data comes back untouched.
    """
    def test_read_packaged_trust_anchor_missing(self):

        with mock.patch.object(CONSTANTS, "TRUST_ANCHOR_RESOURCE", "resources/does_not_exist.der"):
            with self.assertRaises(HandshakeError) as cm:
                read_packaged_trust_anchor()

        self.assertIsNotNone(cm.exception.__cause__)


if __name__ == "__main__":
    unittest.main()
