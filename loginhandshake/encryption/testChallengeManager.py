#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testChallengeManager.py
    Author:
    Date:

    Description:
        Test suite for verify token generation: token length, uniqueness from
        a system source, reproducibility from a seeded source, and rejection
        of broken random sources.
"""

import random
import unittest
from loginhandshake.encryption.challenge_manager import generate_verify_token
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes, Severity
import loginhandshake.constants as CONSTANTS


class _ShortSource:

    def randbytes(self, n):
        return b"\x00" * (n - 1)


class _FailingSource:

    def randbytes(self, n):
        raise OSError("entropy pool unavailable")


class TestChallengeManager(unittest.TestCase):

    """
        Tokens are always exactly 4 bytes.
    """
    def test_token_length(self):

        source = random.SystemRandom()
        for _ in range(100):
            token = generate_verify_token(source)
            self.assertIsInstance(token, bytes)
            self.assertEqual(CONSTANTS.VERIFY_TOKEN_LENGTH, len(token))

    """
        Tokens from a system source do not repeat.
    """
    def test_tokens_unique(self):

        source = random.SystemRandom()
        tokens = {generate_verify_token(source) for _ in range(1000)}

        self.assertEqual(1000, len(tokens))

    """
        A seeded source gives reproducible fixtures.
    """
    def test_seeded_source_is_reproducible(self):

        first = [generate_verify_token(random.Random(7)) for _ in range(3)]
        expected = random.Random(7).randbytes(4)

        self.assertEqual([expected] * 3, first)

    """
        Missing or broken sources raise configuration errors.
    """
    def test_rejects_invalid_sources(self):

        with self.assertRaises(HandshakeError) as cm:
            generate_verify_token(None)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_RANDOM_SOURCE)
        self.assertEqual(cm.exception.severity, Severity.CONFIGURATION)

        with self.assertRaises(HandshakeError) as cm:
            generate_verify_token(_ShortSource())
        self.assertEqual(cm.exception.application_code, ApplicationCodes.VERIFY_TOKEN_ERROR)

        with self.assertRaises(HandshakeError) as cm:
            generate_verify_token(_FailingSource())
        self.assertEqual(cm.exception.application_code, ApplicationCodes.VERIFY_TOKEN_ERROR)
        self.assertIsInstance(cm.exception.__cause__, OSError)


if __name__ == "__main__":
    unittest.main()
