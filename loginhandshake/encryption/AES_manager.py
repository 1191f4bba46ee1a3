#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: AES_manager.py
    Author: Alex Biddle

    Description:
        Holds the shared secret established during the login handshake and
        builds the AES/CFB8 stream ciphers an encrypted connection runs on.
        The secret is used as both the AES key and the initialisation vector,
        with one independent cipher state per direction.
"""


import typing
from dataclasses import dataclass, field
from cryptography.hazmat.primitives.ciphers import Cipher, CipherContext, algorithms, modes
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.handlers.sanitization_validation as VALIDATION
import loginhandshake.constants as CONSTANTS



"""
    Symmetric key material recovered from the client's encrypted shared secret.
    Always tagged as an AES key; the raw bytes are kept out of repr().
"""
@dataclass(frozen=True)
class SharedSecret:

    encoded: bytes = field(repr=False)
    algorithm: str = CONSTANTS.SHARED_SECRET_ALGORITHM

    def __post_init__(self) -> None:
        encoded = VALIDATION.validate_bytes(self.encoded, "shared_secret")

        if not encoded:
            raise HandshakeError(ApplicationCodes.INVALID_SHARED_SECRET, Severity.CONNECTION, "Shared secret must not be empty", "shared_secret")

        # Freeze a bytes copy even if a bytearray was passed in
        object.__setattr__(self, "encoded", encoded)

    def __len__(self) -> int:
        return len(self.encoded)


    """
        Build the encrypting and decrypting AES/CFB8 contexts for a connection.

        @require len(self.encoded) == 16, the secret doubles as the 128-bit IV
        @return tuple: (encryptor, decryptor), each with its own state
    """
    def create_cipher(self) -> typing.Tuple[CipherContext, CipherContext]:
        try:
            if len(self.encoded) != CONSTANTS.SHARED_SECRET_LENGTH:
                raise HandshakeError(ApplicationCodes.INVALID_SHARED_SECRET, Severity.CONNECTION, "Stream cipher requires a 16 byte shared secret", "shared_secret")

            cipher = Cipher(algorithms.AES(self.encoded), modes.CFB8(self.encoded))
            return cipher.encryptor(), cipher.decryptor()

        except HandshakeError:
            raise
        except Exception as e:
            raise HandshakeError(ApplicationCodes.CIPHER_ENGINE_ERROR, Severity.CONFIGURATION, "AES/CFB8 cipher is unavailable", "cipher") from e



class AESManager:

    """
        Generate a fresh shared secret, as a client does before encrypting it
        with the server's public key.

        @param random_source: object providing randbytes(n), e.g. random.SystemRandom()
        @return SharedSecret: 16 random bytes tagged as AES.
    """
    @staticmethod
    def generate_shared_secret(random_source: typing.Any) -> SharedSecret:

        VALIDATION.validate_random_source(random_source)

        try:
            return SharedSecret(bytes(random_source.randbytes(CONSTANTS.SHARED_SECRET_LENGTH)))

        except HandshakeError:
            raise
        except Exception as e:
            raise HandshakeError(ApplicationCodes.INVALID_RANDOM_SOURCE, Severity.CONFIGURATION, "Random source failed to produce a shared secret", "random_source") from e
