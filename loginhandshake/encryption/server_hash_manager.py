#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: server_hash_manager.py
    Author: Alex Biddle

    Description:
        Computes the "server id" hash a client and the session service both
        derive to prove they saw the same handshake. The SHA-1 digest of
        serverId (Latin-1) || shared secret || server public key (DER) is read
        as a signed big-endian two's-complement integer and printed in
        lowercase hex, so the result may start with "-" and is never
        zero-padded. That rendering is what the session service expects.
"""


import hashlib
import typing
from cryptography.hazmat.primitives.asymmetric import rsa
from loginhandshake.encryption.AES_manager import SharedSecret
from loginhandshake.encryption.RSA_manager import RSAManager
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.handlers.sanitization_validation as VALIDATION
import loginhandshake.constants as CONSTANTS


# SHA-1 digest size in bytes
_DIGEST_SIZE = 20



"""
    Compute the raw 20 byte server id digest.

    @param server_id (str): session id of the current login attempt.
    @param shared_secret (SharedSecret | bytes): secret shared with the client.
    @param public_key (RSAPublicKey | bytes): server public key, or its DER encoding.
    @return bytes: SHA-1 digest.
"""
def get_server_id_hash(server_id: str, shared_secret: typing.Union[SharedSecret, bytes], public_key: typing.Union[rsa.RSAPublicKey, bytes]) -> bytes:
    try:
        # Validate server id type
        if not isinstance(server_id, str):
            raise HandshakeError(ApplicationCodes.INVALID_TYPE, Severity.CONNECTION, "Server id must be a string", "server_id")

        # Accept both the wrapped secret and its raw bytes
        if isinstance(shared_secret, SharedSecret):
            secret_bytes = shared_secret.encoded
        else:
            secret_bytes = VALIDATION.validate_bytes(shared_secret, "shared_secret")

        # Accept both a key object and already-encoded DER
        if isinstance(public_key, rsa.RSAPublicKey):
            key_bytes = RSAManager.encode_public_key(public_key)
        else:
            key_bytes = VALIDATION.validate_bytes(public_key, "public_key")

        hasher = hashlib.sha1()

        # Characters outside Latin-1 are replaced by "?"
        hasher.update(server_id.encode(CONSTANTS.SERVER_ID_CHARSET, errors="replace"))
        hasher.update(secret_bytes)
        hasher.update(key_bytes)

        digest = hasher.digest()

        # Validate digest output
        if len(digest) != _DIGEST_SIZE:
            raise HandshakeError(ApplicationCodes.SERVER_ID_HASH_ERROR, Severity.CONFIGURATION, "Invalid digest output from SHA-1", "server_id_hash")

        return digest

    except HandshakeError:
        raise
    except Exception as e:
        raise HandshakeError(ApplicationCodes.SERVER_ID_HASH_ERROR, Severity.CONFIGURATION, "Server id hash computation failure", "server_id_hash") from e



"""
    Render a digest as a signed two's-complement integer in lowercase hex.

    @param digest (bytes): big-endian digest bytes.
    @return str: hex digits, with a leading "-" for negative values, no padding.
"""
def format_server_id_hash(digest: bytes) -> str:

    digest = VALIDATION.validate_bytes(digest, "digest", allow_empty=False)

    return format(int.from_bytes(digest, "big", signed=True), "x")



def get_server_id_hash_string(server_id: str, shared_secret: typing.Union[SharedSecret, bytes], public_key: typing.Union[rsa.RSAPublicKey, bytes]) -> str:
    return format_server_id_hash(get_server_id_hash(server_id, shared_secret, public_key))
