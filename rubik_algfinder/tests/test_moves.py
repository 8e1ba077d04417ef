import unittest

from rubik_algfinder.logic.moves import (
    format_algorithm,
    inverse_move,
    normalize_token,
    parse_sequence,
    split_move,
)


class TestMoves(unittest.TestCase):
    def test_normalize(self):
        self.assertEqual(normalize_token(" R "), "R")
        self.assertEqual(normalize_token("U’"), "U'")
        self.assertEqual(normalize_token("D2'"), "D2")
        self.assertEqual(normalize_token("M2"), "M2")
        self.assertEqual(normalize_token(""), "")

    def test_invalid_tokens(self):
        for tok in ("Q", "R3", "R''", "2R"):
            with self.assertRaises(ValueError):
                normalize_token(tok)

    def test_inverse(self):
        self.assertEqual(inverse_move("R"), "R'")
        self.assertEqual(inverse_move("R'"), "R")
        self.assertEqual(inverse_move("R2"), "R2")
        self.assertEqual(inverse_move("x"), "x'")
        self.assertEqual(inverse_move(""), "")

    def test_split(self):
        self.assertEqual(split_move("F"), ("F", 1))
        self.assertEqual(split_move("F2"), ("F", 2))
        self.assertEqual(split_move("F'"), ("F", 3))
        with self.assertRaises(ValueError):
            split_move("")

    def test_parse_sequence(self):
        self.assertEqual(parse_sequence("R U R' U'"), ["R", "U", "R'", "U'"])
        self.assertEqual(parse_sequence("R,U2  M'"), ["R", "U2", "M'"])
        self.assertEqual(parse_sequence("   "), [])

    def test_format_algorithm(self):
        self.assertEqual(format_algorithm(["R", "U", "R'"]), "R U R'")
        self.assertEqual(format_algorithm([]), "")


if __name__ == "__main__":
    unittest.main()
