#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: challenge_manager.py
    Author: Alex Biddle

    Description:
        Generates the verify token sent with the server's encryption request.
        The client echoes it back encrypted, which binds the login attempt to
        this server's key pair. The random source is supplied by the caller.
"""


import typing
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.handlers.sanitization_validation as VALIDATION
import loginhandshake.constants as CONSTANTS



"""
    Generate a random verify token.

    @param random_source: object providing randbytes(n); use random.SystemRandom()
                          or secrets.SystemRandom() in production.
    @return bytes: exactly CONSTANTS.VERIFY_TOKEN_LENGTH (4) random bytes.
"""
def generate_verify_token(random_source: typing.Any) -> bytes:

    VALIDATION.validate_random_source(random_source)

    try:
        token = bytes(random_source.randbytes(CONSTANTS.VERIFY_TOKEN_LENGTH))

    except Exception as e:
        raise HandshakeError(ApplicationCodes.VERIFY_TOKEN_ERROR, Severity.CONFIGURATION, "Random source failed to produce a verify token", "random_source") from e

    # A short token from a broken source must never be handed out
    if len(token) != CONSTANTS.VERIFY_TOKEN_LENGTH:
        raise HandshakeError(ApplicationCodes.VERIFY_TOKEN_ERROR, Severity.CONFIGURATION, "Random source returned the wrong number of bytes", "random_source")

    return token
