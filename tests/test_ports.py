"""Tests for local port allocation"""

import itertools
import unittest

from expose_cli.errors import InvalidPort
from expose_cli.ports import next_available_port, validate_port


class PortAllocationTests(unittest.TestCase):
    def test_empty_state_returns_base(self):
        self.assertEqual(next_available_port([], 3000), 3000)

    def test_skips_claimed_ports(self):
        self.assertEqual(next_available_port([3000, 3001], 3000), 3002)

    def test_fills_lowest_gap(self):
        self.assertEqual(next_available_port([3000, 3002], 3000), 3001)

    def test_ports_below_base_are_ignored(self):
        self.assertEqual(next_available_port([80, 2999], 3000), 3000)

    def test_never_returns_claimed_port(self):
        claimed = [3000, 3001, 3003, 3004, 3006]
        for perm in itertools.permutations(claimed):
            with self.subTest(order=perm):
                port = next_available_port(perm, 3000)
                self.assertNotIn(port, claimed)
                self.assertEqual(port, 3002)

    def test_validate_port_range(self):
        self.assertEqual(validate_port(8090), 8090)
        self.assertEqual(validate_port(65535), 65535)
        with self.assertRaises(InvalidPort):
            validate_port(0)
        with self.assertRaises(InvalidPort):
            validate_port(70000)


if __name__ == "__main__":
    unittest.main()
