"""
Tests for subprocess timeout constants.
"""

import unittest

from expose_cli.subprocess_timeouts import TIMEOUT_LONG, TIMEOUT_QUICK, TIMEOUT_STANDARD, TIMEOUTS, get_timeout


class TestSubprocessTimeouts(unittest.TestCase):
    """Test subprocess timeout constants and helpers."""

    def test_timeout_ordering(self):
        """Test that timeouts are in ascending order."""
        self.assertLess(TIMEOUT_QUICK, TIMEOUT_STANDARD)
        self.assertLess(TIMEOUT_STANDARD, TIMEOUT_LONG)

    def test_cloudflared_timeouts_defined(self):
        """Test that every cloudflared control-plane call has a timeout."""
        for op in ("cloudflared_list", "cloudflared_create", "cloudflared_route_dns"):
            self.assertIn(op, TIMEOUTS, f"{op} should have a defined timeout")
            self.assertGreater(TIMEOUTS[op], 0)

    def test_only_used_operations_listed(self):
        self.assertEqual(
            set(TIMEOUTS),
            {"cloudflared_list", "cloudflared_create", "cloudflared_route_dns", "taskkill"},
        )

    def test_get_timeout_default(self):
        self.assertEqual(get_timeout("unknown"), TIMEOUT_STANDARD)
        self.assertEqual(get_timeout("unknown", default=7), 7)


if __name__ == "__main__":
    unittest.main()
