#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: constants.py
    Author: Alex Biddle

    Description:
        Centralized constants for the login encryption handshake. Defines the
        fixed key sizes and algorithm names, the verify token length, the exact
        layout of the signed client key text, the signature salt bounds, and
        the packaged trust anchor resource. None of these are configurable at
        runtime.
"""


################################################################################################
# Key pair / challenge
################################################################################################

# Algorithm of the server key pair
KEY_PAIR_ALGORITHM = "RSA"

# Modulus length of the server key pair (bits)
RSA_LENGTH: int = 1024

# Public exponent used for every generated key
RSA_PUBLIC_EXPONENT: int = 65537

# Number of random bytes in a verify token
VERIFY_TOKEN_LENGTH: int = 4


################################################################################################
# Shared secret
################################################################################################

# The shared secret is always used as an AES key
SHARED_SECRET_ALGORITHM = "AES"

# Length of a secret generated by the client side (bytes)
SHARED_SECRET_LENGTH: int = 16


################################################################################################
# Signed client key layout
################################################################################################

# Base64 line length of the signed key text
SIGNABLE_LINE_LENGTH: int = 76

# Line separator of the signed key text (never CRLF)
SIGNABLE_LINE_SEPARATOR = "\n"

SIGNABLE_BEGIN_MARKER = "-----BEGIN RSA PUBLIC KEY-----"
SIGNABLE_END_MARKER = "-----END RSA PUBLIC KEY-----"

# Charset of the signed key text
SIGNABLE_CHARSET = "ascii"


################################################################################################
# Signed nonce
################################################################################################

# Width of the salt appended to a nonce (bytes, big-endian)
SIGNATURE_SALT_LENGTH: int = 8

# Signed 64-bit bounds of the salt
SIGNATURE_SALT_MIN: int = -(2 ** 63)
SIGNATURE_SALT_MAX: int = 2 ** 63 - 1


################################################################################################
# Server id hash / trust anchor
################################################################################################

# Single byte per character, unmappable characters become "?"
SERVER_ID_CHARSET = "latin-1"

# Package-relative location of the authority's X.509 DER public key
TRUST_ANCHOR_PACKAGE = "loginhandshake"
TRUST_ANCHOR_RESOURCE = "resources/yggdrasil_session_pubkey.der"
