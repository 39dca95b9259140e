"""
Unit tests for joker_odds/cli.py
"""
import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from joker_odds.cli import EXIT_INVALID_CONFIG, EXIT_OK, build_parser, main


def run_cli(*argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        status = main(list(argv))
    return status, out.getvalue().splitlines(), err.getvalue()


class TestParser(unittest.TestCase):
    def test_flags_default_to_none(self):
        args = build_parser().parse_args([])
        self.assertIsNone(args.cards)
        self.assertIsNone(args.hand_size)

    def test_flags(self):
        args = build_parser().parse_args(['--cards', '9', '--decks', '2', '--jokers', '3', '--hand-size', '6'])
        self.assertEqual((args.cards, args.decks, args.jokers, args.hand_size), (9, 2, 3, 6))


class TestMain(unittest.TestCase):
    def test_too_many_cards(self):
        status, out, err = run_cli('--cards', '13')
        self.assertEqual(status, EXIT_INVALID_CONFIG)
        self.assertEqual(out, [])
        self.assertIn("error: cards must be at most 12", err)

    def test_unsupported_hand_size(self):
        status, out, err = run_cli('--hand-size', '7')
        self.assertEqual(status, EXIT_INVALID_CONFIG)
        self.assertEqual(out, [])
        self.assertIn("hand_size must be 5 or 6", err)

    def test_missing_config_file(self):
        status, _, err = run_cli('--config', '/nonexistent/joker_odds.yaml')
        self.assertEqual(status, EXIT_INVALID_CONFIG)
        self.assertIn("Config file not found", err)
        # reported once, not again through an unconfigured logger
        self.assertEqual(err.splitlines(), ["error: Config file not found: /nonexistent/joker_odds.yaml"])

    def test_converged_run(self):
        status, out, _ = run_cli('--cards', '2', '--seed', '8', '--batch-size', '500', '--log-level', 'WARNING')
        self.assertEqual(status, EXIT_OK)
        self.assertEqual(out[0], "500 iterations...")
        self.assertEqual(out[1], "--------------")
        self.assertEqual(out[2], "(no overlapping 99% confidence intervals)")
        self.assertEqual(out[3], "total iterations: 500")
        rows = out[4:]
        self.assertEqual(len(rows), 11)
        self.assertTrue(rows[0].startswith("       Pair: "))
        widths = {len(row.split(':')[0]) for row in rows}
        self.assertEqual(widths, {len("3 of a kind")})

    def test_capped_run(self):
        status, out, _ = run_cli(
            '--cards', '7', '--decks', '0', '--jokers', '12', '--seed', '2', '--hand-size', '6',
            '--batch-size', '50', '--max-iterations', '100', '--log-level', 'ERROR',
        )
        self.assertEqual(status, EXIT_OK)
        self.assertEqual(out[:2], ["50 iterations...", "100 iterations..."])
        self.assertEqual(out[3], "(stopped before intervals separated)")
        self.assertEqual(out[4], "total iterations: 100")
        self.assertEqual(len(out[5:]), 13)
        # every category is certain with an all-joker deck, so the intervals coincide
        self.assertTrue(all(row.endswith(": 1.000000 (100)") for row in out[5:]))
