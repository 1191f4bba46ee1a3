#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testErrorHandler.py
    Author:
    Date:

    Description:
        Test suite for HandshakeError and ErrorHandler failure records.
"""

import json
import os
import tempfile
import unittest
from loginhandshake.handlers.error_handler import ErrorHandler, HandshakeError, ApplicationCodes, Severity
from loginhandshake.utilities.audit_log import AuditLog


class TestErrorHandler(unittest.TestCase):

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory(prefix="error_handler_test_")
        self.addCleanup(self.temp_dir.cleanup)

        self.audit_log = AuditLog(os.path.join(self.temp_dir.name, "audit.log"))
        self.handler = ErrorHandler(self.audit_log)

    """
        HandshakeError keeps its metadata and formats code and detail.
    """
    def test_handshake_error_fields(self):

        exc = HandshakeError(ApplicationCodes.RSA_DECRYPT_ERROR, Severity.CONNECTION, "Failed to decrypt shared secret", "encrypted_secret")

        self.assertEqual("rsa_decrypt_error: Failed to decrypt shared secret", str(exc))
        self.assertEqual("encrypted_secret", exc.field)
        self.assertFalse(exc.is_fatal)
        self.assertTrue(HandshakeError(ApplicationCodes.TRUST_ANCHOR_LOAD_ERROR, Severity.FATAL, "x").is_fatal)

    """
        A HandshakeError becomes a failure record with its own code and severity.
    """
    def test_handle_handshake_error(self):

        exc = HandshakeError(ApplicationCodes.INVALID_SALT, Severity.CONNECTION, "Signature salt must be an integer", "signature_salt")
        record = self.handler.handle_handshake_error(exc, username="jeb_", context="verify_signed_nonce")

        self.assertEqual("failure", record["status"])
        self.assertEqual("jeb_", record["username"])
        self.assertEqual(ApplicationCodes.INVALID_SALT, record["error_code"])
        self.assertEqual(Severity.CONNECTION, record["severity"])
        self.assertEqual("signature_salt", record["field"])
        self.assertRegex(record["timestamp"], r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")

    """
        Unknown exceptions normalise to internal_error; the raw detail only goes to the log.
    """
    def test_handle_unexpected_exception(self):

        record = self.handler.handle_handshake_error(RuntimeError("openssl exploded"), context="verify_client_key")

        self.assertEqual(ApplicationCodes.INTERNAL_ERROR, record["error_code"])
        self.assertEqual(Severity.CONFIGURATION, record["severity"])
        self.assertNotIn("openssl", record["message"])

        with open(self.audit_log.path, "r", encoding="utf-8") as f:
            events = [json.loads(line) for line in f]

        self.assertEqual(1, len(events))
        self.assertEqual("handshake_exception", events[0]["event"])
        self.assertEqual("openssl exploded", events[0]["detail"])
        self.assertEqual("verify_client_key", events[0]["context"])


if __name__ == "__main__":
    unittest.main()
