#!/usr/bin/python3 -u
# SPDX-License-Identifier: BSD-2
import logging
import unittest

import tpm12_auth
from tpm12_auth import config


class ConfigTest(unittest.TestCase):
    def test_defaults(self):
        self.assertIs(config.CONSTANT_TIME_COMPARE, True)
        self.assertEqual(set(config.CONFIG.keys()), {"constant_time_compare"})

    def test_import_leaves_logger_level_alone(self):
        self.assertEqual(tpm12_auth.__name__, "tpm12_auth")
        self.assertEqual(logging.getLogger("tpm12_auth").level, logging.NOTSET)


if __name__ == "__main__":
    unittest.main()
