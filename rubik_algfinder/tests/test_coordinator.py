import threading
import time
import unittest
from dataclasses import replace

from rubik_algfinder.core import CubeGeometry
from rubik_algfinder.core.facelets import FaceletState
from rubik_algfinder.errors import EmptyMoveSet, ShapeMismatch, UnknownTurn
from rubik_algfinder.logic.turns import get_catalog
from rubik_algfinder.solve.config import SearchConfig
from rubik_algfinder.solve.coordinator import DepthCoordinator
from rubik_algfinder.solve.dfs_worker import search
from rubik_algfinder.solve.iddfs_solver import find_algorithms, iddfs_solve
from rubik_algfinder.solve.stream import DepthBatch, EndReason, ResultStream
from rubik_algfinder.tests.support import brute_force, names

RU = ["R", "R'", "R2", "U", "U'", "U2"]
CENTERS = [4, 13, 22, 31, 40, 49]


def thread_config(**kwargs):
    kwargs.setdefault("executor", "thread")
    kwargs.setdefault("workers", 2)
    return SearchConfig(**kwargs)


class TestDepthCoordinator(unittest.TestCase):
    def setUp(self):
        self.catalog = get_catalog()
        self.solved = FaceletState.solved()

    def _collect(self, stream):
        with stream:
            batches = list(stream.batches())
        return batches, stream.end

    def test_trivial_search_reports_empty_algorithm_without_workers(self):
        coordinator = DepthCoordinator(
            self.solved, self.solved, self.catalog.turns, thread_config(max_depth=0)
        )
        batches, end = self._collect(ResultStream(coordinator).start())
        self.assertEqual(batches, [DepthBatch(0, ((),))])
        self.assertEqual(end.reason, EndReason.EXHAUSTED)
        self.assertEqual(end.depth, 0)
        self.assertFalse(coordinator.workers_spawned)

    def test_trivial_search_nothing_else_at_depth_zero(self):
        stream = find_algorithms(self.solved, self.solved, None, thread_config(max_depth=2))
        with stream:
            found = list(stream)
        self.assertEqual(found, [()])

    def test_impossible_search_is_exhausted(self):
        start = self.catalog.apply_sequence(self.solved, ["U"])
        stream = find_algorithms(start, self.solved, ["R"], thread_config(max_depth=4))
        batches, end = self._collect(stream)
        self.assertEqual([b.depth for b in batches], [0, 1, 2, 3, 4])
        self.assertTrue(all(b.algorithms == () for b in batches))
        self.assertEqual(end.reason, EndReason.EXHAUSTED)

    def test_exhausted_when_pruning_leaves_nothing(self):
        start = self.catalog.apply_sequence(self.solved, ["U"])
        stream = find_algorithms(start, self.solved, ["R2"], thread_config())
        batches, end = self._collect(stream)
        self.assertEqual([b.depth for b in batches], [0, 1, 2])
        self.assertEqual(end.reason, EndReason.EXHAUSTED)

    def test_sune_with_r_and_u(self):
        start, goal = self._sune()

        stream = find_algorithms(start, goal, RU, thread_config(max_depth=7))
        batches, end = self._collect(stream)

        self.assertEqual(end.reason, EndReason.EXHAUSTED)
        for b in batches[:7]:
            self.assertEqual(b.algorithms, (), f"profundidad {b.depth}")
        self.assertEqual(batches[7].depth, 7)
        self.assertIn("R U2 R' U' R U' R'", names(batches[7].algorithms))
        for alg in batches[7].algorithms:
            self.assertTrue(start.apply_sequence(alg).matches(goal))

    def test_sune_with_all_face_turns(self):
        start, goal = self._sune()
        stream = find_algorithms(start, goal, None, SearchConfig(max_depth=6))
        batches, end = self._collect(stream)

        self.assertEqual(end.reason, EndReason.EXHAUSTED)
        self.assertEqual([b.depth for b in batches], list(range(7)))
        for b in batches:
            self.assertEqual(b.algorithms, (), f"profundidad {b.depth}")

    def test_sune_depth_seven_with_all_face_turns(self):
        # Solo la porción de la profundidad 7 que empieza con "R U2"
        start, goal = self._sune()
        prefix = self.catalog.parse("R U2")
        found = names(search(start, goal, prefix, 5, self.catalog.turns, self.catalog))
        self.assertIn("R U2 R' U' R U' R'", found)

    def _sune(self):
        geometry = CubeGeometry()
        touched = set(geometry.layer_facelets("R")) | set(geometry.layer_facelets("U"))
        start = self.catalog.apply_sequence(self.solved, self.catalog.parse("R U R' U R U2 R'"))
        return start, self.solved.keep_only(touched)

    def test_same_face_runs_collapse_to_allowed_turns(self):
        start = self.catalog.apply_sequence(self.solved, ["R"])
        stream = find_algorithms(
            start, self.solved, ["R", "R'"], thread_config(max_depth=3, workers=1)
        )
        with stream:
            found = names(stream)
        self.assertEqual(found, ["R'"])

        only_r = find_algorithms(self.solved, self.solved, ["R"], thread_config(max_depth=4))
        with only_r:
            self.assertEqual(names(only_r), [""])

    def test_depth_ordering_and_completeness(self):
        start = self.catalog.apply_sequence(self.solved, ["R", "U'"])
        goal = self.solved.keep_only(range(0, 27))
        allowed = self.catalog.resolve(RU + ["F2"])

        for workers in (1, 3):
            stream = find_algorithms(start, goal, allowed, thread_config(max_depth=4, workers=workers))
            batches, _ = self._collect(stream)
            lengths = [len(a) for b in batches for a in b.algorithms]
            self.assertEqual(lengths, sorted(lengths))
            for b in batches[1:]:
                self.assertEqual(
                    list(b.algorithms),
                    brute_force(self.catalog, start, goal, allowed, b.depth),
                )

    def test_process_executor_matches_threads(self):
        goal = self.solved.keep_only(CENTERS)
        allowed = self.catalog.resolve(RU)

        results = []
        for executor in ("thread", "process"):
            stream = find_algorithms(
                self.solved, goal, allowed, SearchConfig(max_depth=3, workers=2, executor=executor)
            )
            batches, end = self._collect(stream)
            self.assertEqual(end.reason, EndReason.EXHAUSTED)
            results.append(batches)
        self.assertEqual(results[0], results[1])
        self.assertEqual(len(results[1][3].algorithms), 6 * 3 * 3)

    def test_cancel_keeps_only_complete_depths(self):
        start = self.catalog.apply_sequence(self.solved, ["R", "U"])
        stream = find_algorithms(start, self.solved, None, thread_config())
        batches = []
        with stream:
            for batch in stream.batches():
                batches.append(batch)
                if batch.depth == 2:
                    stream.cancel()
        self.assertEqual(stream.end.reason, EndReason.CANCELLED)
        self.assertEqual([b.depth for b in batches], list(range(len(batches))))
        self.assertIn("U' R'", names(batches[2].algorithms))
        self.assertLessEqual(stream.end.depth, batches[-1].depth)

    def test_time_budget_cancels(self):
        start = self.catalog.apply_sequence(self.solved, self.catalog.parse("R U F' L2 D B' R2 U'"))
        began = time.monotonic()
        stream = find_algorithms(start, self.solved, None, thread_config(time_budget=0.3))
        batches, end = self._collect(stream)
        self.assertEqual(end.reason, EndReason.CANCELLED)
        self.assertLess(time.monotonic() - began, 30)
        self.assertEqual([b.depth for b in batches], list(range(len(batches))))

    def test_abandoned_iterator_cancels(self):
        stream = find_algorithms(self.solved, self.solved, None, thread_config())
        it = iter(stream)
        self.assertEqual(next(it), ())
        it.close()
        self.assertTrue(stream.cancelled)
        stream.join(timeout=10)
        self.assertIsNone(stream.end)

    def test_worker_failure_is_fatal(self):
        coordinator = DepthCoordinator(self.solved, self.solved, RU, thread_config(max_depth=3))
        coordinator.problem = replace(coordinator.problem, allowed=("M",))
        stream = ResultStream(coordinator).start()
        with self.assertRaises(UnknownTurn):
            with stream:
                list(stream.batches())

    def test_preconditions_fail_fast(self):
        with self.assertRaises(EmptyMoveSet):
            find_algorithms(self.solved, self.solved, [], thread_config())
        with self.assertRaises(ShapeMismatch):
            find_algorithms("WWW", self.solved, RU, thread_config())
        with self.assertRaises(UnknownTurn):
            find_algorithms(self.solved, self.solved, ["M"], thread_config())


class TestIddfsSolve(unittest.TestCase):
    def setUp(self):
        self.catalog = get_catalog()
        self.config = thread_config()

    def test_solver_small_scramble(self):
        c = self.catalog.apply_sequence(FaceletState.solved(), self.catalog.parse("R U R' U'"))
        sol = iddfs_solve(c, max_depth=6, config=self.config)
        self.assertIsNotNone(sol)
        self.assertEqual(len(sol), 4)
        c = self.catalog.apply_sequence(c, sol)
        self.assertEqual(c, FaceletState.solved())

    def test_already_solved(self):
        self.assertEqual(iddfs_solve(FaceletState.solved(), config=self.config), [])

    def test_reports_depths(self):
        c = self.catalog.apply_sequence(FaceletState.solved(), ["R", "U"])
        depths = []
        sol = iddfs_solve(c, max_depth=3, on_depth=depths.append, config=self.config)
        self.assertEqual(sol, ["U'", "R'"])
        self.assertEqual(depths[:2], [1, 2])

    def test_cancel(self):
        c = self.catalog.apply_sequence(FaceletState.solved(), ["R", "U", "F"])
        self.assertIsNone(iddfs_solve(c, should_cancel=lambda: True, config=self.config))

    def test_cancel_during_a_long_depth(self):
        c = self.catalog.apply_sequence(
            FaceletState.solved(), self.catalog.parse("R U F' L2 D B' R2 U'")
        )
        stop = threading.Event()
        threading.Timer(0.3, stop.set).start()
        began = time.monotonic()
        self.assertIsNone(
            iddfs_solve(c, max_depth=8, should_cancel=stop.is_set, config=self.config)
        )
        self.assertLess(time.monotonic() - began, 30)


if __name__ == "__main__":
    unittest.main()
