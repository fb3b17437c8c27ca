# SPDX-License-Identifier: BSD-2
import unittest

from tpm12_auth import (
    TPM_Exception,
    NullArgumentError,
    ProtocolError,
    AuthenticationFailedError,
    TPM_RC,
    TSS_RC,
)


class ExceptionTest(unittest.TestCase):
    def test_default_codes(self):
        self.assertEqual(NullArgumentError().rc, TSS_RC.NULL_ARG)
        self.assertEqual(ProtocolError().rc, TSS_RC.BAD_TAG)
        self.assertEqual(AuthenticationFailedError().rc, TSS_RC.HMAC_FAIL)
        self.assertEqual(TPM_Exception().rc, TSS_RC.HMAC_FAIL)

    def test_hierarchy(self):
        for cls in (NullArgumentError, ProtocolError, AuthenticationFailedError):
            self.assertTrue(issubclass(cls, TPM_Exception))
        self.assertTrue(issubclass(TPM_Exception, RuntimeError))

    def test_session(self):
        exc = AuthenticationFailedError(2)
        self.assertEqual(exc.session, 2)
        self.assertEqual(exc.rc, TSS_RC.HMAC_FAIL)
        self.assertEqual(
            str(exc), "authorization HMAC mismatch: authorization session 2"
        )

    def test_input_types(self):
        self.assertEqual(
            str(ProtocolError(TSS_RC.BAD_SIZE, "short")),
            "buffer size does not match its layout: short",
        )
        self.assertEqual(str(TPM_Exception(TPM_RC.AUTHFAIL)), "TPM_RC.AUTHFAIL")
        self.assertIsInstance(TPM_Exception(0x500B).rc, TSS_RC)
        self.assertEqual(str(TPM_Exception(0xDEAD)), "0xdead")


if __name__ == "__main__":
    unittest.main()
