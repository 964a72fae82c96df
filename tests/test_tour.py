import random
import unittest

from atsp_ga.data import random_matrix
from atsp_ga.operators import InversionMutation, PartiallyMappedCrossover
from atsp_ga.tour import Tour, tour_from_labels
from tests.helpers import ring_matrix


class TestTourConstruction(unittest.TestCase):
    def test_new_random_is_permutation(self):
        rng = random.Random(0)
        for n in (1, 2, 5, 17, 64):
            for _ in range(20):
                tour = Tour.new_random(n, rng)
                self.assertEqual(len(tour), n)
                self.assertEqual(sorted(tour), list(range(n)))
                self.assertTrue(tour.is_permutation())

    def test_new_random_is_reproducible(self):
        a = Tour.new_random(30, random.Random(42))
        b = Tour.new_random(30, random.Random(42))
        self.assertEqual(a, b)

    def test_value_semantics(self):
        tour = Tour([2, 0, 1])
        clone = tour.copy()
        clone.mutate(1.0, random.Random(3))
        self.assertEqual(tour.nodes, (2, 0, 1))
        self.assertNotEqual(tour, clone)

    def test_tours_are_unhashable(self):
        with self.assertRaises(TypeError):
            hash(Tour([0, 1]))

    def test_tour_from_labels(self):
        tour = tour_from_labels(ring_matrix(), ["B", "C", "D", "A"])
        self.assertEqual(tour.nodes, (1, 2, 3, 0))


class TestTourCost(unittest.TestCase):
    def test_cost_includes_closing_edge(self):
        m = ring_matrix()
        self.assertEqual(Tour([0, 1, 2, 3]).cost(m), 4.0)
        self.assertEqual(Tour([0, 2, 1, 3]).cost(m), 10 + 10 + 10 + 1)

    def test_cost_invariant_under_rotation(self):
        m = random_matrix(9, seed=3)
        tour = Tour.new_random(9, random.Random(5))
        base = tour.cost(m)
        for start in tour.nodes:
            self.assertAlmostEqual(Tour(tour.rotated(start).nodes).cost(m), base)

    def test_cost_changes_under_reversal_when_asymmetric(self):
        m = ring_matrix()
        forward = Tour([0, 1, 2, 3])
        backward = Tour([3, 2, 1, 0])
        self.assertEqual(forward.cost(m), 4.0)
        self.assertEqual(backward.cost(m), 40.0)

    def test_cost_is_cached_and_invalidated(self):
        m = ring_matrix()
        tour = Tour([0, 1, 2, 3])
        self.assertIsNone(tour.cached_cost)
        tour.cost(m)
        self.assertEqual(tour.cached_cost, 4.0)
        tour.mutate(1.0, random.Random(1))
        self.assertIsNone(tour.cached_cost)
        self.assertEqual(tour.cost(m), m.tour_cost(tour.nodes))

    def test_zero_rate_keeps_cached_cost(self):
        m = ring_matrix()
        tour = Tour([0, 1, 2, 3])
        tour.cost(m)
        tour.mutate(0.0, random.Random(1))
        self.assertEqual(tour.nodes, (0, 1, 2, 3))
        self.assertEqual(tour.cached_cost, 4.0)


class TestTourOperators(unittest.TestCase):
    def test_crossover_yields_permutation(self):
        rng = random.Random(11)
        for n in (2, 3, 8, 31):
            for _ in range(50):
                a = Tour.new_random(n, rng)
                b = Tour.new_random(n, rng)
                child = a.crossover(b, rng)
                self.assertTrue(child.is_permutation(n))

    def test_crossover_with_explicit_operator(self):
        rng = random.Random(2)
        a = Tour.new_random(12, rng)
        b = Tour.new_random(12, rng)
        child = a.crossover(b, rng, PartiallyMappedCrossover())
        self.assertTrue(child.is_permutation(12))

    def test_mutation_preserves_permutation(self):
        rng = random.Random(8)
        for rate in (0.0, 0.1, 0.5, 1.0):
            for _ in range(30):
                tour = Tour.new_random(15, rng)
                tour.mutate(rate, rng)
                self.assertEqual(len(tour), 15)
                self.assertTrue(tour.is_permutation())
                tour.mutate(rate, rng, InversionMutation())
                self.assertTrue(tour.is_permutation())


if __name__ == "__main__":
    unittest.main()
