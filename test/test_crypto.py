#!/usr/bin/python3 -u
"""
SPDX-License-Identifier: BSD-2
"""
import hashlib
import hmac
import unittest
import unittest.mock

from tpm12_auth import crypto, config


class CryptoTest(unittest.TestCase):
    def test_sha1(self):
        self.assertEqual(
            crypto.sha1(b"abc").hex(), "a9993e364706816aba3e25717850c26c9cd0d89d"
        )
        self.assertEqual(crypto.sha1(b"a", b"", b"bc"), crypto.sha1(b"abc"))
        self.assertEqual(crypto.sha1(), hashlib.sha1(b"").digest())

    def test_sha1_bytearray(self):
        self.assertEqual(
            crypto.sha1(bytearray(b"ab"), memoryview(b"c")), crypto.sha1(b"abc")
        )

    def test_hmac_sha1(self):
        # RFC 2202 test case 2
        self.assertEqual(
            crypto.hmac_sha1(b"Jefe", b"what do ya want ", b"for nothing?").hex(),
            "effcdf6ae5eb2fa2d27416d5f184df9c259a7c79",
        )
        key = b"\x0b" * 20
        self.assertEqual(
            crypto.hmac_sha1(key, b"Hi There"),
            hmac.new(key, b"Hi There", hashlib.sha1).digest(),
        )

    def test_verify_hmac_sha1(self):
        key = b"\x00" * 20
        good = hmac.new(key, b"abc", hashlib.sha1).digest()
        bad = bytes([good[0] ^ 0x01]) + good[1:]

        self.assertTrue(crypto.verify_hmac_sha1(key, good, b"a", b"bc"))
        self.assertFalse(crypto.verify_hmac_sha1(key, bad, b"abc"))
        self.assertFalse(crypto.verify_hmac_sha1(key, good[:19], b"abc"))

    def test_verify_hmac_sha1_plain_compare(self):
        key = b"\x00" * 20
        good = hmac.new(key, b"abc", hashlib.sha1).digest()
        bad = good[:-1] + bytes([good[-1] ^ 0x80])

        with unittest.mock.patch.object(config, "CONSTANT_TIME_COMPARE", False):
            self.assertTrue(crypto.verify_hmac_sha1(key, good, b"abc"))
            self.assertFalse(crypto.verify_hmac_sha1(key, bad, b"abc"))

    def test_generate_nonce(self):
        nonce = crypto.generate_nonce()
        self.assertIsInstance(nonce, bytes)
        self.assertEqual(len(nonce), 20)
        self.assertNotEqual(nonce, crypto.generate_nonce())
        self.assertEqual(len(crypto.generate_nonce(8)), 8)


if __name__ == "__main__":
    unittest.main()
