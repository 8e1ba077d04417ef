import unittest

from rubik_algfinder.core.facelets import (
    WILDCARD,
    FaceletState,
    compile_matcher,
    count_missing,
    matches,
)
from rubik_algfinder.errors import ShapeMismatch
from rubik_algfinder.logic.turns import get_catalog

SOLVED_TEXT = "WWWWWWWWW YYYYYYYYY OOOOOOOOO RRRRRRRRR GGGGGGGGG BBBBBBBBB"


class TestFaceletShape(unittest.TestCase):
    def test_solved_has_54_facelets(self):
        self.assertEqual(len(FaceletState.solved()), 54)

    def test_short_array_fails(self):
        with self.assertRaises(ShapeMismatch):
            FaceletState(["W"] * 53)

    def test_long_array_fails(self):
        with self.assertRaises(ShapeMismatch):
            FaceletState(["W"] * 55)

    def test_shape_mismatch_is_a_value_error(self):
        with self.assertRaises(ValueError):
            FaceletState.from_string("WWW")

    def test_from_string_ignores_spaces(self):
        self.assertEqual(FaceletState.from_string(SOLVED_TEXT), FaceletState.solved())
        self.assertEqual(FaceletState.solved().to_string(), SOLVED_TEXT)

    def test_from_string_rejects_unknown_tags(self):
        text = "X" + SOLVED_TEXT.replace(" ", "")[1:]
        with self.assertRaises(ValueError) as ctx:
            FaceletState.from_string(text)
        self.assertNotIsInstance(ctx.exception, ShapeMismatch)
        self.assertEqual(FaceletState.from_string(SOLVED_TEXT.lower()), FaceletState.solved())

    def test_from_string_wildcards(self):
        text = "." * 9 + "_" * 9 + SOLVED_TEXT.replace(" ", "")[18:]
        state = FaceletState.from_string(text)
        self.assertTrue(all(state.is_wildcard(i) for i in range(18)))
        self.assertEqual(state[18], "O")

    def test_states_are_hashable_values(self):
        a = FaceletState.solved()
        b = FaceletState.from_string(SOLVED_TEXT)
        self.assertEqual(hash(a), hash(b))
        self.assertEqual(len({a, b}), 1)

    def test_apply_does_not_mutate(self):
        s = FaceletState.solved()
        t = s.apply(get_catalog().get("R"))
        self.assertNotEqual(s, t)
        self.assertEqual(s, FaceletState.solved())

    def test_to_net(self):
        lines = FaceletState.solved().to_net().splitlines()
        self.assertEqual(len(lines), 9)
        self.assertEqual(lines[0].strip(), "WWW")
        self.assertEqual(lines[3], "OOO GGG RRR BBB")
        self.assertEqual(lines[8].strip(), "YYY")


class TestMatches(unittest.TestCase):
    def setUp(self):
        self.catalog = get_catalog()
        self.solved = FaceletState.solved()

    def test_exact_match(self):
        self.assertTrue(matches(self.solved, self.solved))
        moved = self.solved.apply(self.catalog.get("R"))
        self.assertFalse(matches(moved, self.solved))

    def test_all_wildcard_goal_matches_anything(self):
        moved = self.catalog.apply_sequence(self.solved, ["R", "U", "F'"])
        self.assertTrue(matches(moved, FaceletState.wildcard()))

    def test_match_is_directional(self):
        with_hole = self.solved.with_wildcards([0])
        self.assertTrue(matches(self.solved, with_hole))
        self.assertFalse(matches(with_hole, self.solved))

    def test_wildcards_keep_a_match(self):
        s = self.catalog.apply_sequence(self.solved, ["R", "U"])
        g = s.keep_only(range(0, 54, 2))
        self.assertTrue(matches(s, g))
        for extra in ([0], [10, 20], list(range(0, 54, 4))):
            self.assertTrue(matches(s, g.with_wildcards(extra)))

    def test_compiled_matcher_single_position(self):
        goal = FaceletState.wildcard().facelets[:4] + ("G",) + FaceletState.wildcard().facelets[5:]
        matcher = compile_matcher(goal)
        self.assertFalse(matcher(self.solved.facelets))  # U centro es blanco
        self.assertTrue(matcher(("G",) * 54))

    def test_keep_only(self):
        g = self.solved.keep_only([4])
        self.assertEqual(g[4], "W")
        self.assertEqual(sum(1 for c in g if c != WILDCARD), 1)


class TestCountMissing(unittest.TestCase):
    def setUp(self):
        self.solved = FaceletState.solved()

    def test_nothing_missing(self):
        self.assertEqual(count_missing(self.solved, self.solved), {})

    def test_wildcard_goal_needs_nothing(self):
        start = FaceletState.wildcard()
        self.assertEqual(count_missing(start, FaceletState.wildcard()), {})

    def test_missing_stickers(self):
        start = self.solved.with_wildcards([0, 1, 4])
        self.assertEqual(count_missing(start, self.solved), {"W": 3})

    def test_corners_and_edges_are_counted_apart(self):
        data = list(self.solved)
        data[0] = "Y"   # esquina de U
        data[10] = "W"  # arista de D
        start = FaceletState(data)
        self.assertEqual(count_missing(start, self.solved), {"W": 1, "Y": 1})


if __name__ == "__main__":
    unittest.main()
