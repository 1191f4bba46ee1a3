#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testHandshakeHandler.py
    Author:
    Date:

    Description:

        Test suite for HandshakeHandler. Walks a full login handshake against
        a test trust anchor (verify token, client key verification, shared
        secret exchange, server id hash, signed nonce) and checks the audit
        events written for rejections and failures.
"""

import json
import os
import random
import tempfile
import unittest
from unittest import mock
from datetime import datetime, timezone, timedelta
from loginhandshake.handlers.handshake_handler import HandshakeHandler
from loginhandshake.handlers.packet_handler import ClientPublicKey
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
from loginhandshake.encryption import trust_anchor
from loginhandshake.encryption.trust_anchor import TrustAnchor
from loginhandshake.encryption.RSA_manager import RSAManager
from loginhandshake.encryption.AES_manager import AESManager, SharedSecret
from loginhandshake.encryption.signature_manager import sign_client_key, sign_nonce
from loginhandshake.encryption.server_hash_manager import get_server_id_hash_string
from loginhandshake.utilities.audit_log import AuditLog


class TestHandshakeHandler(unittest.TestCase):

    EXPIRY = datetime(2030, 1, 1, tzinfo=timezone.utc)
    USERNAME = "Notch"

    @classmethod
    def setUpClass(cls) -> None:
        cls.authority = RSAManager.generate_key_pair()
        cls.server_keys = RSAManager.generate_key_pair()
        cls.client_keys = RSAManager.generate_key_pair()
        cls.client_der = RSAManager.encode_public_key(cls.client_keys.public)
        cls.client_signature = sign_client_key(cls.authority.private, cls.client_der, cls.EXPIRY)

    """
        Fresh handler and audit file for each test.
    """
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory(prefix="handshake_handler_test_")
        self.addCleanup(self.temp_dir.cleanup)

        self.audit_log = AuditLog(os.path.join(self.temp_dir.name, "audit.log"))
        self.handler = HandshakeHandler(TrustAnchor(self.authority.public), self.audit_log)

    def _events(self) -> list:
        if not os.path.isfile(self.audit_log.path):
            return []
        with open(self.audit_log.path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    def _client_key(self, signature=None) -> ClientPublicKey:
        return ClientPublicKey(self.client_der, self.EXPIRY, signature if signature is not None else self.client_signature)

    """
        Full login: every step succeeds and both sides agree on the server id hash.
    """
    def test_full_handshake(self):

        source = random.SystemRandom()

        token = self.handler.generate_verify_token(source)
        self.assertEqual(4, len(token))

        self.assertTrue(self.handler.verify_client_key(self._client_key(), self.EXPIRY - timedelta(minutes=5), username=self.USERNAME))

        # Client side: pick a secret and wrap it for the server
        client_secret = AESManager.generate_shared_secret(source)
        encrypted_secret = RSAManager.encrypt_shared_key(self.server_keys.public, client_secret)

        shared = self.handler.decrypt_shared_key(self.server_keys.private, encrypted_secret, username=self.USERNAME)
        self.assertEqual(client_secret, shared)

        server_hash = self.handler.get_server_id_hash_string("", shared, self.server_keys.public)
        client_hash = get_server_id_hash_string("", client_secret.encoded, RSAManager.encode_public_key(self.server_keys.public))
        self.assertEqual(client_hash, server_hash)

        salt = source.getrandbits(63)
        nonce_signature = sign_nonce(self.client_keys.private, token, salt)
        self.assertTrue(self.handler.verify_signed_nonce(token, self._client_key().public_key(), salt, nonce_signature, username=self.USERNAME))

        # Nothing was rejected, and no secret bytes reached the log
        events = self._events()
        self.assertEqual(["trust_anchor_bound"], [e["event"] for e in events])
        self.assertNotIn(shared.encoded.hex(), json.dumps(events))

    """
        Expired and badly signed keys return False and are audited with a reason.
    """
    def test_rejected_client_keys_are_audited(self):

        self.assertFalse(self.handler.verify_client_key(self._client_key(), self.EXPIRY, username=self.USERNAME))

        bad_signature = bytes([self.client_signature[0] ^ 0x80]) + self.client_signature[1:]
        self.assertFalse(self.handler.verify_client_key(self._client_key(bad_signature), self.EXPIRY - timedelta(seconds=1), username=self.USERNAME))

        rejected = [e for e in self._events() if e["event"] == "client_key_rejected"]
        self.assertEqual(["expired", "bad_signature"], [e["reason"] for e in rejected])
        self.assertTrue(all(e["username"] == self.USERNAME for e in rejected))

    """
        verify_timestamp defaults to now.
    """
    def test_verify_client_key_defaults_to_now(self):

        past_expiry = datetime.now(timezone.utc) - timedelta(days=1)
        signature = sign_client_key(self.authority.private, self.client_der, past_expiry)

        self.assertFalse(self.handler.verify_client_key(ClientPublicKey(self.client_der, past_expiry, signature)))
        self.assertTrue(self.handler.verify_client_key(self._client_key()))

    """
        Decryption failures are audited and re-raised unchanged.
    """
    def test_decrypt_failure_is_audited(self):

        with self.assertRaises(HandshakeError) as cm:
            self.handler.decrypt_shared_key(self.server_keys.private, b"\x02" * 7, username=self.USERNAME)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.RSA_DECRYPT_ERROR)
        self.assertEqual(cm.exception.severity, Severity.CONNECTION)

        failures = [e for e in self._events() if e["event"] == "handshake_exception"]
        self.assertEqual(1, len(failures))
        self.assertEqual("decrypt_shared_key", failures[0]["context"])
        self.assertEqual(Severity.CONNECTION, failures[0]["severity"])

    """
        A broken random source is audited and re-raised.
    """
    def test_verify_token_failure_is_audited(self):

        source = mock.Mock()
        source.randbytes.return_value = b"\x01\x02"

        with self.assertRaises(HandshakeError) as cm:
            self.handler.generate_verify_token(source)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.VERIFY_TOKEN_ERROR)

        failures = [e for e in self._events() if e["event"] == "handshake_exception"]
        self.assertEqual(["generate_verify_token"], [e["context"] for e in failures])
        self.assertEqual(Severity.CONFIGURATION, failures[0]["severity"])

    """
        Server id hash failures are audited and re-raised.
    """
    def test_server_id_hash_failure_is_audited(self):

        with self.assertRaises(HandshakeError) as cm:
            self.handler.get_server_id_hash_string(None, b"\x00" * 16, self.server_keys.public)  # type: ignore[arg-type]

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)

        failures = [e for e in self._events() if e["event"] == "handshake_exception"]
        self.assertEqual(["get_server_id_hash_string"], [e["context"] for e in failures])
        self.assertEqual(Severity.CONNECTION, failures[0]["severity"])

    """
        Rejected nonces are audited.
    """
    def test_rejected_nonce_is_audited(self):

        signature = sign_nonce(self.client_keys.private, b"nonce", 1)

        self.assertFalse(self.handler.verify_signed_nonce(b"nonce", self.client_keys.public, 2, signature, username=self.USERNAME))
        self.assertEqual(1, len([e for e in self._events() if e["event"] == "signed_nonce_rejected"]))

    """
        Key pair generation is audited with the key size only.
    """
    def test_generate_key_pair(self):

        key_pair = self.handler.generate_key_pair()

        self.assertEqual(1024, key_pair.public.key_size)
        generated = [e for e in self._events() if e["event"] == "server_key_pair_generated"]
        self.assertEqual([1024], [e["key_size"] for e in generated])

    """
        Without an explicit anchor the handler needs the process-wide one.
    """
    def test_default_trust_anchor(self):

        with mock.patch.object(trust_anchor, "_ACTIVE_TRUST_ANCHOR", None):
            with self.assertRaises(HandshakeError) as cm:
                HandshakeHandler(audit_log=self.audit_log)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.TRUST_ANCHOR_NOT_LOADED)

        anchor = TrustAnchor(self.authority.public)
        with mock.patch.object(trust_anchor, "_ACTIVE_TRUST_ANCHOR", anchor):
            handler = HandshakeHandler(audit_log=self.audit_log)
        self.assertIs(anchor, handler.trust_anchor)

    def test_rejects_non_trust_anchor(self):

        with self.assertRaises(HandshakeError) as cm:
            HandshakeHandler(self.authority.public, self.audit_log)  # type: ignore[arg-type]

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)
        self.assertTrue(cm.exception.is_fatal)


if __name__ == "__main__":
    unittest.main()
