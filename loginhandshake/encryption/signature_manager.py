#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: signature_manager.py
    Author: Alex Biddle

    Description:
        Signature checks of the login handshake.

        - to_signable() renders (expiry, client key) into the exact text the
          authority signed: epoch millis, then the DER key as base64 in 76
          character "\\n"-separated lines between RSA PUBLIC KEY markers, with
          a trailing newline. Any byte of difference breaks every signature.
        - verify_client_key() rejects expired keys before touching the
          signature, then checks SHA1withRSA against the trust anchor.
        - verify_signed_nonce() checks SHA256withRSA over nonce || salt with a
          client key the caller already trusts.

        An untrusted, expired or badly signed key is a plain False. Only a
        missing signature engine or an unusable key object raises.

        The sign_* helpers are the authority/client counterparts, for tests
        and tooling.
"""


import base64
import typing
from datetime import datetime
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa, padding
from cryptography.hazmat.primitives import hashes
from loginhandshake.encryption.trust_anchor import TrustAnchor, get_trust_anchor
from loginhandshake.handlers.packet_handler import ClientPublicKey
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.handlers.sanitization_validation as VALIDATION
import loginhandshake.constants as CONSTANTS



####################################################################################################
#                                   Canonical form
####################################################################################################

"""
    Render the canonical signed form of a client key.

    @param public_key_bytes (bytes): X.509 DER encoding of the client key.
    @param expiry (datetime): expiry instant the authority attached to the key.
    @return bytes: ASCII text "<epochMillis>-----BEGIN RSA PUBLIC KEY-----\\n<b64>\\n-----END RSA PUBLIC KEY-----\\n"
"""
def to_signable(public_key_bytes: bytes, expiry: datetime) -> bytes:

    public_key_bytes = VALIDATION.validate_bytes(public_key_bytes, "client_key")
    expiry_millis = VALIDATION.to_epoch_millis(VALIDATION.to_utc_datetime(expiry, "expiry"))

    encoded = base64.b64encode(public_key_bytes).decode(CONSTANTS.SIGNABLE_CHARSET)
    step = CONSTANTS.SIGNABLE_LINE_LENGTH
    wrapped = CONSTANTS.SIGNABLE_LINE_SEPARATOR.join(encoded[i:i + step] for i in range(0, len(encoded), step))

    text = (
        f"{expiry_millis}{CONSTANTS.SIGNABLE_BEGIN_MARKER}\n"
        f"{wrapped}\n"
        f"{CONSTANTS.SIGNABLE_END_MARKER}\n"
    )
    return text.encode(CONSTANTS.SIGNABLE_CHARSET)



####################################################################################################
#                                   Verification
####################################################################################################

"""
    Run one RSA PKCS#1 v1.5 verification with a fresh verifier.

    @return bool: True on a matching signature, False on mismatch.
    @raises HandshakeError when the key is unusable or the hash is unavailable.
"""
def _verify_pkcs1v15(public_key: typing.Any, signature: bytes, data: bytes, algorithm: hashes.HashAlgorithm, field_name: str) -> bool:

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise HandshakeError(ApplicationCodes.INVALID_PUBLIC_KEY, Severity.CONFIGURATION, "Verification key must be an RSA public key", field_name)

    try:
        public_key.verify(signature, data, padding.PKCS1v15(), algorithm)
        return True

    except InvalidSignature:
        return False
    except UnsupportedAlgorithm as e:
        raise HandshakeError(ApplicationCodes.SIGNATURE_ENGINE_ERROR, Severity.CONFIGURATION, f"{algorithm.name} with RSA is unavailable", "signature") from e



"""
    Check that the authority vouches for a client key at the given instant.

    @param client_key (ClientPublicKey): key, expiry and authority signature.
    @param verify_timestamp (datetime): instant of the check, normally now.
    @param trust_anchor (TrustAnchor): authority key; the process-wide anchor when omitted.
    @return bool: True only if verify_timestamp < expiry and the signature matches.
"""
def verify_client_key(client_key: ClientPublicKey, verify_timestamp: datetime, trust_anchor: typing.Optional[TrustAnchor] = None) -> bool:
    try:
        if not isinstance(client_key, ClientPublicKey):
            raise HandshakeError(ApplicationCodes.INVALID_TYPE, Severity.CONNECTION, "Client key must be a ClientPublicKey", "client_key")

        # Expired keys are rejected before any RSA work
        if client_key.is_expired(verify_timestamp):
            return False

        if trust_anchor is None:
            trust_anchor = get_trust_anchor()

        signable = to_signable(client_key.key, client_key.expiry)
        return _verify_pkcs1v15(trust_anchor.public_key, client_key.signature, signable, hashes.SHA1(), "trust_anchor")

    except HandshakeError:
        raise
    except Exception as e:
        raise HandshakeError(ApplicationCodes.SIGNATURE_ENGINE_ERROR, Severity.CONFIGURATION, "Unexpected error during client key verification", "signature") from e



"""
    Check a client's signature over a server nonce and salt.

    @param nonce (bytes): nonce the server sent.
    @param client_public_key (RSAPublicKey): key the caller already trusts.
    @param signature_salt (int): signed 64-bit salt chosen by the client.
    @param signature (bytes): SHA256withRSA signature over nonce || salt (8 bytes, big-endian).
    @return bool
"""
def verify_signed_nonce(nonce: bytes, client_public_key: rsa.RSAPublicKey, signature_salt: int, signature: bytes) -> bool:
    try:
        nonce = VALIDATION.validate_bytes(nonce, "nonce")
        signature = VALIDATION.validate_bytes(signature, "signature")
        salt_bytes = VALIDATION.encode_signature_salt(signature_salt)

        return _verify_pkcs1v15(client_public_key, signature, nonce + salt_bytes, hashes.SHA256(), "client_public_key")

    except HandshakeError:
        raise
    except Exception as e:
        raise HandshakeError(ApplicationCodes.SIGNATURE_ENGINE_ERROR, Severity.CONFIGURATION, "Unexpected error during nonce verification", "signature") from e



####################################################################################################
#                                   Signing counterparts
####################################################################################################

def _sign_pkcs1v15(private_key: typing.Any, data: bytes, algorithm: hashes.HashAlgorithm) -> bytes:
    try:
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise HandshakeError(ApplicationCodes.INVALID_PRIVATE_KEY, Severity.CONFIGURATION, "Signing key must be an RSA private key", "private_key")

        return private_key.sign(data, padding.PKCS1v15(), algorithm)

    except HandshakeError:
        raise
    except Exception as e:
        raise HandshakeError(ApplicationCodes.RSA_SIGN_ERROR, Severity.CONFIGURATION, f"{algorithm.name} with RSA signing failure", "signature") from e


def sign_client_key(authority_private_key: rsa.RSAPrivateKey, public_key_bytes: bytes, expiry: datetime) -> bytes:
    return _sign_pkcs1v15(authority_private_key, to_signable(public_key_bytes, expiry), hashes.SHA1())


def sign_nonce(private_key: rsa.RSAPrivateKey, nonce: bytes, signature_salt: int) -> bytes:
    data = VALIDATION.validate_bytes(nonce, "nonce") + VALIDATION.encode_signature_salt(signature_salt)
    return _sign_pkcs1v15(private_key, data, hashes.SHA256())
