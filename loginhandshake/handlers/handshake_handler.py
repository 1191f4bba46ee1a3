#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File name: handshake_handler.py
Author: Alex Biddle

Description:
    Front door of the login encryption handshake for the protocol layer.
    Binds the immutable trust anchor and exposes each handshake step as a
    method, in the order a connection uses them: verify token, client key
    verification, shared secret decryption, server id hash, signed nonce
    verification. Rejections and failures are written to the audit log;
    secrets never are.

    The handler keeps no per-connection state, so one instance serves every
    connection concurrently.
"""



import typing
from datetime import datetime
from cryptography.hazmat.primitives.asymmetric import rsa
from loginhandshake.handlers.error_handler import ErrorHandler, HandshakeError, ApplicationCodes, Severity
from loginhandshake.handlers.packet_handler import ClientPublicKey
from loginhandshake.encryption.AES_manager import SharedSecret
from loginhandshake.encryption.RSA_manager import RSAManager, KeyPair
from loginhandshake.encryption.trust_anchor import TrustAnchor, get_trust_anchor
from loginhandshake.encryption import challenge_manager, server_hash_manager, signature_manager
from loginhandshake.utilities.audit_log import AuditLog
import loginhandshake.handlers.sanitization_validation as VALIDATION



"""
    Stateless service object over the handshake components. All unexpected
    errors are routed through the ErrorHandler for logging and re-raised.
"""
class HandshakeHandler:
    """
        Initialize the HandshakeHandler.

        @param: TrustAnchor - authority key; the process-wide anchor is used when omitted,
                so initialize_trust_anchor() must have run first.
        @param: AuditLog - destination of audit events; a default AuditLog when omitted.
    """
    def __init__(self, trust_anchor: typing.Optional[TrustAnchor] = None, audit_log: typing.Optional[AuditLog] = None):

        if trust_anchor is None:
            trust_anchor = get_trust_anchor()

        if not isinstance(trust_anchor, TrustAnchor):
            raise HandshakeError(ApplicationCodes.INVALID_TYPE, Severity.FATAL, "HandshakeHandler requires a TrustAnchor instance", "trust_anchor")

        self._trust_anchor: TrustAnchor = trust_anchor
        self._audit_log: AuditLog = audit_log if audit_log is not None else AuditLog()
        self._error_handler: ErrorHandler = ErrorHandler(self._audit_log)

        self._audit_log.event(event="trust_anchor_bound", key_size=trust_anchor.public_key.key_size)


    @property
    def trust_anchor(self) -> TrustAnchor:
        return self._trust_anchor


    ###########################################################################
    # Server startup
    ###########################################################################

    def generate_key_pair(self) -> KeyPair:
        try:
            key_pair = RSAManager.generate_key_pair()
            self._audit_log.event(event="server_key_pair_generated", key_size=key_pair.public.key_size)
            return key_pair

        except HandshakeError as e:
            self._error_handler.handle_handshake_error(e, context="generate_key_pair")
            raise


    ###########################################################################
    # Per connection
    ###########################################################################

    def generate_verify_token(self, random_source: typing.Any) -> bytes:
        try:
            return challenge_manager.generate_verify_token(random_source)

        except HandshakeError as e:
            self._error_handler.handle_handshake_error(e, context="generate_verify_token")
            raise


    """
        Verify a client key against the trust anchor.

        @param: ClientPublicKey - key, expiry and signature sent by the client.
        @param: datetime - instant of the check; now when omitted.
        @param: str - username for the audit trail.
        @returns: bool - False for expired or badly signed keys.
    """
    def verify_client_key(self, client_key: ClientPublicKey, verify_timestamp: typing.Optional[datetime] = None, username: str = "") -> bool:
        try:
            if verify_timestamp is None:
                verify_timestamp = VALIDATION.utc_now()

            if not isinstance(client_key, ClientPublicKey):
                raise HandshakeError(ApplicationCodes.INVALID_TYPE, Severity.CONNECTION, "Client key must be a ClientPublicKey", "client_key")

            # Checked separately only to label the audit event
            if client_key.is_expired(verify_timestamp):
                self._audit_log.event(event="client_key_rejected", username=username, reason="expired", expiry=client_key.expiry.isoformat())
                return False

            if not signature_manager.verify_client_key(client_key, verify_timestamp, self._trust_anchor):
                self._audit_log.event(event="client_key_rejected", username=username, reason="bad_signature", expiry=client_key.expiry.isoformat())
                return False

            return True

        except HandshakeError as e:
            self._error_handler.handle_handshake_error(e, username=username, context="verify_client_key")
            raise


    """
        Recover the shared secret sent by the client.

        @raises: HandshakeError(RSA_DECRYPT_ERROR, CONNECTION) - abort the connection, do not retry.
    """
    def decrypt_shared_key(self, private_key: rsa.RSAPrivateKey, encrypted_secret: bytes, username: str = "") -> SharedSecret:
        try:
            return RSAManager.decrypt_shared_key(private_key, encrypted_secret)

        except HandshakeError as e:
            self._error_handler.handle_handshake_error(e, username=username, context="decrypt_shared_key")
            raise


    def get_server_id_hash_string(self, server_id: str, shared_secret: typing.Union[SharedSecret, bytes], public_key: typing.Union[rsa.RSAPublicKey, bytes]) -> str:
        try:
            return server_hash_manager.get_server_id_hash_string(server_id, shared_secret, public_key)

        except HandshakeError as e:
            self._error_handler.handle_handshake_error(e, context="get_server_id_hash_string")
            raise


    def verify_signed_nonce(self, nonce: bytes, client_public_key: rsa.RSAPublicKey, signature_salt: int, signature: bytes, username: str = "") -> bool:
        try:
            verified = signature_manager.verify_signed_nonce(nonce, client_public_key, signature_salt, signature)

            if not verified:
                self._audit_log.event(event="signed_nonce_rejected", username=username)

            return verified

        except HandshakeError as e:
            self._error_handler.handle_handshake_error(e, username=username, context="verify_signed_nonce")
            raise
