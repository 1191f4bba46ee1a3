#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: packet_handler.py
    Author: Alex Biddle

    Description:
        Typed records for the values the protocol layer pulls out of login
        packets before handing them to the handshake components. Only the
        client key record lives here for now; it is transient and exists for
        the duration of one connection's verification step.
"""


from dataclasses import dataclass, field
from datetime import datetime
from cryptography.hazmat.primitives.asymmetric import rsa
from loginhandshake.encryption.RSA_manager import RSAManager
import loginhandshake.handlers.sanitization_validation as VALIDATION



"""
    Public key presented by a client, together with the authority's promise
    that the key is good until expiry.

    @param key (bytes): X.509 SubjectPublicKeyInfo DER of the client key.
    @param expiry (datetime): instant the authority's signature stops vouching for key.
    @param signature (bytes): authority signature over the canonical form of (expiry, key).
"""
@dataclass(frozen=True)
class ClientPublicKey:

    key: bytes
    expiry: datetime
    signature: bytes = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", VALIDATION.validate_bytes(self.key, "client_key", allow_empty=False))
        object.__setattr__(self, "expiry", VALIDATION.to_utc_datetime(self.expiry, "expiry"))
        object.__setattr__(self, "signature", VALIDATION.validate_bytes(self.signature, "signature"))


    """
        The key is only usable while verify_timestamp is strictly before expiry;
        reaching expiry exactly counts as expired.
    """
    def is_expired(self, verify_timestamp: datetime) -> bool:
        return not VALIDATION.to_utc_datetime(verify_timestamp, "verify_timestamp") < self.expiry


    def public_key(self) -> rsa.RSAPublicKey:
        return RSAManager.load_public_key(self.key)
