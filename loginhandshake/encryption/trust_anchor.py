#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: trust_anchor.py
    Author: Alex Biddle

    Description:
        Loads the signing authority's public key, the single trust anchor that
        vouches for client keys. The key is an X.509 DER blob shipped as
        package data (resources/yggdrasil_session_pubkey.der) or handed in by
        the host at startup.

        Lifecycle:
            initialize_trust_anchor() must run once, before the first
            connection is served. Any failure is fatal and should abort
            startup. The loaded anchor is read-only afterwards and there is no
            teardown; get_trust_anchor() returns it from any thread.
"""


import typing
import threading
from dataclasses import dataclass
from importlib import resources
from cryptography.hazmat.primitives.asymmetric import rsa
from loginhandshake.encryption.RSA_manager import RSAManager
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.constants as CONSTANTS


_INIT_LOCK = threading.Lock()
_ACTIVE_TRUST_ANCHOR: typing.Optional["TrustAnchor"] = None



"""
    Immutable wrapper around the authority's RSA public key.
"""
@dataclass(frozen=True)
class TrustAnchor:

    public_key: rsa.RSAPublicKey


    """
        Build a TrustAnchor from X.509 SubjectPublicKeyInfo DER bytes.

        @raises HandshakeError(TRUST_ANCHOR_LOAD_ERROR, FATAL) on malformed or non-RSA data.
    """
    @classmethod
    def from_der(cls, der_data: bytes) -> "TrustAnchor":
        try:
            return cls(RSAManager.load_public_key(der_data))
        except HandshakeError as e:
            raise HandshakeError(ApplicationCodes.TRUST_ANCHOR_LOAD_ERROR, Severity.FATAL, f"Malformed trust anchor key: {e.detail}", "trust_anchor") from e


    @property
    def encoded(self) -> bytes:
        return RSAManager.encode_public_key(self.public_key)



"""
    Read the packaged trust anchor DER file.

    @return bytes: raw file contents.
    @raises HandshakeError(TRUST_ANCHOR_LOAD_ERROR, FATAL) when the resource is missing or unreadable.
"""
def read_packaged_trust_anchor() -> bytes:
    try:
        resource = resources.files(CONSTANTS.TRUST_ANCHOR_PACKAGE).joinpath(CONSTANTS.TRUST_ANCHOR_RESOURCE)
        return resource.read_bytes()

    except Exception as e:
        raise HandshakeError(ApplicationCodes.TRUST_ANCHOR_LOAD_ERROR, Severity.FATAL, f"Failed to read trust anchor resource {CONSTANTS.TRUST_ANCHOR_RESOURCE}", "trust_anchor") from e



"""
    Load the process-wide trust anchor. Call exactly once at startup.

    @param der_data (bytes): DER public key; the packaged resource is read when omitted.
    @return TrustAnchor: the loaded anchor.
    @raises HandshakeError(TRUST_ANCHOR_ALREADY_LOADED, FATAL) on a second call.
    @raises HandshakeError(TRUST_ANCHOR_LOAD_ERROR, FATAL) when the key cannot be loaded.
"""
def initialize_trust_anchor(der_data: typing.Optional[bytes] = None) -> TrustAnchor:
    global _ACTIVE_TRUST_ANCHOR

    with _INIT_LOCK:
        if _ACTIVE_TRUST_ANCHOR is not None:
            raise HandshakeError(ApplicationCodes.TRUST_ANCHOR_ALREADY_LOADED, Severity.FATAL, "Trust anchor is already loaded and cannot be replaced", "trust_anchor")

        if der_data is None:
            der_data = read_packaged_trust_anchor()

        _ACTIVE_TRUST_ANCHOR = TrustAnchor.from_der(der_data)
        return _ACTIVE_TRUST_ANCHOR



def get_trust_anchor() -> TrustAnchor:
    trust_anchor = _ACTIVE_TRUST_ANCHOR

    if trust_anchor is None:
        raise HandshakeError(ApplicationCodes.TRUST_ANCHOR_NOT_LOADED, Severity.FATAL, "Trust anchor used before initialize_trust_anchor()", "trust_anchor")

    return trust_anchor



def is_trust_anchor_initialized() -> bool:
    return _ACTIVE_TRUST_ANCHOR is not None
