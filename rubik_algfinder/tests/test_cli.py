import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from main import main


def run_cli(*argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = main(list(argv))
    return code, out.getvalue(), err.getvalue()


class TestCli(unittest.TestCase):
    def test_finds_inverse(self):
        code, out, _ = run_cli(
            "--scramble", "R U",
            "--moves", "R R' U U'",
            "--max-depth", "2",
            "--executor", "thread",
            "--workers", "2",
        )
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[:4], ["== 0 ==", "== 1 ==", "== 2 ==", "U' R'"])
        self.assertEqual(lines[-1], "-- 1 algoritmos (exhausted)")

    def test_empty_algorithm_and_limit(self):
        code, out, _ = run_cli("--executor", "thread", "--workers", "1", "--limit", "1")
        self.assertEqual(code, 0)
        self.assertIn("(vacío)", out)
        self.assertTrue(out.rstrip().endswith("-- 1 algoritmos (cancelled)"))

    def test_limit_cuts_inside_a_batch(self):
        code, out, _ = run_cli(
            "--goal", "_" * 54,
            "--moves", "R U",
            "--max-depth", "3",
            "--limit", "2",
            "--executor", "thread",
        )
        self.assertEqual(code, 0)
        self.assertEqual(
            out.splitlines(),
            ["== 0 ==", "(vacío)", "== 1 ==", "R", "-- 2 algoritmos (cancelled)"],
        )

    def test_invalid_start(self):
        code, _, err = run_cli("--start", "WWW")
        self.assertEqual(code, 2)
        self.assertIn("Error", err)

    def test_unknown_color(self):
        code, _, err = run_cli("--goal", "Q" * 54)
        self.assertEqual(code, 2)
        self.assertIn("Q", err)

    def test_unknown_move(self):
        code, _, err = run_cli("--moves", "M", "--executor", "thread")
        self.assertEqual(code, 2)
        self.assertIn("M", err)

    def test_missing_colors_warning(self):
        start = "W" * 54
        code, _, err = run_cli(
            "--start", start, "--moves", "R", "--max-depth", "1", "--executor", "thread"
        )
        self.assertEqual(code, 0)
        self.assertIn("Advertencia", err)


if __name__ == "__main__":
    unittest.main()
