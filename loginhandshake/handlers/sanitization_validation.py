#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: sanitization_validation.py
    Author: Alex Biddle

    Description:
        Provides the type checks and conversions shared by the handshake
        components: raw byte validation, UTC normalisation of timestamps,
        epoch millisecond conversion, signed 64-bit salt encoding and random
        source checks.

        Every helper raises HandshakeError for malformed input so callers get
        a stable application code instead of a bare TypeError.
"""

import typing
from datetime import datetime, timezone, timedelta

from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.constants as CONSTANTS


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)


####################################################################################################
#                                   Byte validation
####################################################################################################

"""
    Ensure a value is raw bytes and return an immutable copy.

    @param value (Any): Candidate byte buffer.
    @param field_name (str): Logical field name for context in error messages.
    @param allow_empty (bool): Whether a zero-length buffer is acceptable.
    @return bytes: Immutable copy of the input.
"""
def validate_bytes(value: typing.Any, field_name: str, allow_empty: bool = True) -> bytes:

    # bytes, bytearray and memoryview are all acceptable buffers
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise HandshakeError(ApplicationCodes.INVALID_TYPE, Severity.CONNECTION, f"{field_name} must be bytes", field_name)

    data = bytes(value)

    if not allow_empty and len(data) == 0:
        raise HandshakeError(ApplicationCodes.INVALID_LENGTH, Severity.CONNECTION, f"{field_name} cannot be empty", field_name)

    return data



####################################################################################################
#                                   Timestamps
####################################################################################################

"""
    Normalise a datetime to an aware UTC datetime.

    Naive values are interpreted as UTC.

    @param value (Any): Candidate datetime.
    @param field_name (str): Logical field name for context in error messages.
    @return datetime: Aware datetime in UTC.
"""
def to_utc_datetime(value: typing.Any, field_name: str) -> datetime:

    if not isinstance(value, datetime):
        raise HandshakeError(ApplicationCodes.INVALID_TIMESTAMP, Severity.CONNECTION, f"{field_name} must be a datetime", field_name)

    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)

    return value.astimezone(timezone.utc)


"""
    Convert a datetime into whole milliseconds since the Unix epoch.

    Sub-millisecond precision is floored, including for instants before 1970.

    @param value (datetime): Instant to convert.
    @return int: Milliseconds since 1970-01-01T00:00:00Z.
"""
def to_epoch_millis(value: datetime) -> int:
    return (to_utc_datetime(value, "timestamp") - _EPOCH) // _ONE_MILLISECOND


def utc_now() -> datetime:
    return datetime.now(timezone.utc)



####################################################################################################
#                                   Salts / random sources
####################################################################################################

"""
    Encode a signature salt as a fixed-width, big-endian, signed 64-bit value.

    @param salt (int): Salt in the signed 64-bit range.
    @return bytes: 8 bytes, two's complement.
"""
def encode_signature_salt(salt: typing.Any) -> bytes:

    # bool is an int subclass, but never a meaningful salt
    if isinstance(salt, bool) or not isinstance(salt, int):
        raise HandshakeError(ApplicationCodes.INVALID_SALT, Severity.CONNECTION, "Signature salt must be an integer", "signature_salt")

    if salt < CONSTANTS.SIGNATURE_SALT_MIN or salt > CONSTANTS.SIGNATURE_SALT_MAX:
        raise HandshakeError(ApplicationCodes.INVALID_SALT, Severity.CONNECTION, "Signature salt must fit in a signed 64-bit integer", "signature_salt")

    return salt.to_bytes(CONSTANTS.SIGNATURE_SALT_LENGTH, "big", signed=True)


"""
    Ensure a random source exposes randbytes(n), as random.Random and
    random.SystemRandom do.

    @param random_source (Any): Caller-supplied random number generator.
"""
def validate_random_source(random_source: typing.Any) -> None:

    if random_source is None or not callable(getattr(random_source, "randbytes", None)):
        raise HandshakeError(ApplicationCodes.INVALID_RANDOM_SOURCE, Severity.CONFIGURATION, "Random source must provide randbytes(n)", "random_source")
