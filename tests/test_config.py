import os
import unittest
from unittest.mock import patch

from invoice_pdf.config import env_int, env_str


class EnvHelperTests(unittest.TestCase):
    def test_env_int_uses_default_when_unset_or_invalid(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(env_int("INVOICE_TEST_INT", 5), 5)
        with patch.dict(os.environ, {"INVOICE_TEST_INT": "many"}):
            self.assertEqual(env_int("INVOICE_TEST_INT", 5), 5)

    def test_env_int_enforces_minimum(self) -> None:
        with patch.dict(os.environ, {"INVOICE_TEST_INT": "0"}):
            self.assertEqual(env_int("INVOICE_TEST_INT", 5, minimum=1), 5)
            self.assertEqual(env_int("INVOICE_TEST_INT", 5, minimum=0), 0)

    def test_env_str_strips_and_ignores_blank(self) -> None:
        with patch.dict(os.environ, {"INVOICE_TEST_STR": "  debug "}):
            self.assertEqual(env_str("INVOICE_TEST_STR", "INFO"), "debug")
        with patch.dict(os.environ, {"INVOICE_TEST_STR": "   "}):
            self.assertEqual(env_str("INVOICE_TEST_STR", "INFO"), "INFO")


if __name__ == "__main__":
    unittest.main()
