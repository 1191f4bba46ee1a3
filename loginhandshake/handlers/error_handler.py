#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: error_handler.py
    Author: Alex Biddle

    Description:
        Centralized error handling for the login encryption handshake.
        Defines the single HandshakeError raised by every component, the
        application codes and severities that classify it, and an ErrorHandler
        that turns any exception into a canonical failure record while writing
        the raw detail to the audit log.

        Severities:
            fatal          - startup cannot continue (trust anchor, RSA support)
            connection     - attacker-controlled input was rejected; abort the
                             connection attempt, retrying cannot help
            configuration  - a required algorithm or engine is unavailable
"""


from dataclasses import dataclass
from typing import Optional
from datetime import datetime, timezone
from loginhandshake.utilities.audit_log import AuditLog



"""
    Container Class for error severities.
"""
@dataclass
class Severity:

    # Initialization failure; aborts startup
    FATAL = "fatal"

    # Bad client input for one connection
    CONNECTION = "connection"

    # Missing algorithm or engine
    CONFIGURATION = "configuration"


"""
    Container Class for application error code strings.
"""
@dataclass
class ApplicationCodes:

    INVALID_TYPE                = "invalid_type"
    INVALID_LENGTH              = "invalid_length"
    INVALID_TIMESTAMP           = "invalid_timestamp"
    INVALID_SALT                = "invalid_salt"
    INVALID_RANDOM_SOURCE       = "invalid_random_source"
    INVALID_PUBLIC_KEY          = "invalid_public_key"
    INVALID_PRIVATE_KEY         = "invalid_private_key"
    INVALID_SHARED_SECRET       = "invalid_shared_secret"
    TRUST_ANCHOR_LOAD_ERROR     = "trust_anchor_load_error"
    TRUST_ANCHOR_ALREADY_LOADED = "trust_anchor_already_loaded"
    TRUST_ANCHOR_NOT_LOADED     = "trust_anchor_not_loaded"
    RSA_KEY_GENERATION_ERROR    = "rsa_key_generation_error"
    RSA_ENCRYPT_ERROR           = "rsa_encrypt_error"
    RSA_DECRYPT_ERROR           = "rsa_decrypt_error"
    RSA_SIGN_ERROR              = "rsa_sign_error"
    SIGNATURE_ENGINE_ERROR      = "signature_engine_error"
    CIPHER_ENGINE_ERROR         = "cipher_engine_error"
    VERIFY_TOKEN_ERROR          = "verify_token_error"
    SERVER_ID_HASH_ERROR        = "server_id_hash_error"
    INTERNAL_ERROR              = "internal_error"






class HandshakeError(Exception):

    """
        Initialize a HandshakeError containing application code, severity, detail message, and field context.

        @param application_code (str): Identifier from ApplicationCodes signaling the failure type.
        @param severity (str): One of Severity.* placing the failure in the error taxonomy.
        @param detail (str): Descriptive message, safe to show to operators.
        @param field (str): Logical field related to the error (optional).
        @ensures Error metadata is accessible to the centralized ErrorHandler.
    """
    def __init__(self, application_code: str, severity: str, detail: str, field: str = "") -> None:
        self.application_code = application_code
        self.severity = severity
        self.detail = detail
        self.field = field
        super().__init__(f"{application_code}: {detail}")


    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL






class ErrorHandler:

    """
        Initialize the ErrorHandler and attach an AuditLog for diagnostic event recording.

        @param audit_log (AuditLog): Log to write to; a default AuditLog is created when omitted.
    """
    def __init__(self, audit_log: Optional[AuditLog] = None) -> None:

        self.audit_log = audit_log if audit_log is not None else AuditLog()


    """
        Process an exception and return a standardized failure record.

        @param e (Exception): Exception raised while handling a login attempt.
        @param username (str): Username associated with the attempt, if known.
        @param context (str): Logical context string identifying the failing operation.
        @return dict: canonical failure record
        @ensures Exception is logged to audit_log and a canonical failure record is returned.
    """
    def handle_handshake_error(self, e: Exception, username: str = "", context: str = "") -> dict:

        # If the exception is already a HandshakeError
        if isinstance(e, HandshakeError):
            application_code = e.application_code
            severity = e.severity
            message = e.detail
            field = e.field
        else:
            # Anything else is an environment problem we did not anticipate
            application_code = ApplicationCodes.INTERNAL_ERROR
            severity = Severity.CONFIGURATION
            message = "An internal error occurred during the login handshake."
            field = ""

        # Always log the raw exception detail for operators
        self.audit_log.event(event="handshake_exception", username=username, context=context, severity=severity, detail=str(e))

        return self.create_error_record(username, message, application_code, severity, field)


    """
        Build a standardized failure record.

        @return dict: record including status, timestamp and classification.
    """
    def create_error_record(self, username: str, message: str, error_code: str, severity: str, field: str = "") -> dict:

        timestamp_iso = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

        return {
            "status": "failure",
            "username": username,
            "timestamp": timestamp_iso,
            "message": message,
            "error_code": error_code,
            "severity": severity,
            "field": field,
        }
