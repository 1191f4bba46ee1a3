#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name:    testServerHashManager.py
    Author:
    Date:

    Description:

        Test suite for the server id hash. Checks the signed two's-complement
        hex rendering against the well-known vectors, the input order and
        encoding of the digest, determinism, and that every input changes
        the result.
"""

import hashlib
import unittest

from loginhandshake.encryption.server_hash_manager import get_server_id_hash, get_server_id_hash_string, format_server_id_hash
from loginhandshake.encryption.RSA_manager import RSAManager
from loginhandshake.encryption.AES_manager import SharedSecret
from loginhandshake.handlers.error_handler import HandshakeError, ApplicationCodes



class TestServerHashManager(unittest.TestCase):

    SERVER_ID = ""
    SECRET = bytes(range(16))

    @classmethod
    def setUpClass(cls) -> None:
        cls.key_pair = RSAManager.generate_key_pair()
        cls.public_der = RSAManager.encode_public_key(cls.key_pair.public)


    """
        Known vectors: positive, negative and one without a leading zero nibble.
    """
    def test_known_vectors(self):

        self.assertEqual("4ed1f46bbe04bc756bcb17c0c7ce3e4632f06a48", get_server_id_hash_string("Notch", b"", b""))
        self.assertEqual("-7c9d5b0044c130109a5d7b5fb5c317c02b4e28c1", get_server_id_hash_string("jeb_", b"", b""))
        self.assertEqual("88e16a1019277b15d58faf0541e11910eb756f6", get_server_id_hash_string("simon", b"", b""))



    """
        format_server_id_hash is BigInteger.toString(16): signed, no padding.
    """
    def test_format_server_id_hash(self):

        self.assertEqual("0", format_server_id_hash(b"\x00" * 20))
        self.assertEqual("1", format_server_id_hash(b"\x00" * 19 + b"\x01"))
        self.assertEqual("-1", format_server_id_hash(b"\xff" * 20))
        self.assertEqual("-80", format_server_id_hash(b"\xff" * 19 + b"\x80"))
        self.assertEqual("7f" + "ff" * 19, format_server_id_hash(b"\x7f" + b"\xff" * 19))
        self.assertEqual("-8" + "0" * 39, format_server_id_hash(b"\x80" + b"\x00" * 19))



    """
        The digest covers serverId (Latin-1), then the secret, then the DER key.
    """
    def test_digest_input_order(self):

        expected = hashlib.sha1("sessión".encode("latin-1") + self.SECRET + self.public_der).digest()

        self.assertEqual(expected, get_server_id_hash("sessión", SharedSecret(self.SECRET), self.key_pair.public))
        self.assertEqual(format_server_id_hash(expected), get_server_id_hash_string("sessión", self.SECRET, self.public_der))



    """
        Characters outside Latin-1 are replaced by "?".
    """
    def test_server_id_unmappable_characters(self):

        self.assertEqual(get_server_id_hash_string("a?b", self.SECRET, self.public_der), get_server_id_hash_string("a€b", self.SECRET, self.public_der))



    """
        Same inputs, same output; key object and DER give the same result.
    """
    def test_deterministic(self):

        first = get_server_id_hash_string(self.SERVER_ID, SharedSecret(self.SECRET), self.key_pair.public)
        second = get_server_id_hash_string(self.SERVER_ID, self.SECRET, self.public_der)

        self.assertEqual(first, second)
        self.assertRegex(first, r"^-?[0-9a-f]{1,40}$")



    """
        Changing any input changes the hash.
    """
    def test_each_input_changes_hash(self):

        base = get_server_id_hash_string(self.SERVER_ID, self.SECRET, self.public_der)
        other_key = RSAManager.encode_public_key(RSAManager.generate_key_pair().public)

        self.assertNotEqual(base, get_server_id_hash_string("x", self.SECRET, self.public_der))
        self.assertNotEqual(base, get_server_id_hash_string(self.SERVER_ID, bytes(16), self.public_der))
        self.assertNotEqual(base, get_server_id_hash_string(self.SERVER_ID, self.SECRET, other_key))



    """
        Invalid input types raise INVALID_TYPE.
    """
    def test_rejects_invalid_types(self):

        with self.assertRaises(HandshakeError) as cm:
            get_server_id_hash(b"not-a-str", self.SECRET, self.public_der)  # type: ignore[arg-type]
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)
        self.assertEqual(cm.exception.field, "server_id")

        with self.assertRaises(HandshakeError) as cm:
            get_server_id_hash("", "secret", self.public_der)  # type: ignore[arg-type]
        self.assertEqual(cm.exception.field, "shared_secret")

        with self.assertRaises(HandshakeError) as cm:
            format_server_id_hash(b"")
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_LENGTH)


if __name__ == "__main__":
    unittest.main()
