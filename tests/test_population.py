import random
import unittest

from atsp_ga.population import Population
from atsp_ga.tour import Tour
from tests.helpers import ring_matrix


class TestPopulation(unittest.TestCase):
    def setUp(self):
        self.matrix = ring_matrix()

    def test_initialize(self):
        pop = Population.initialize(12, 4, random.Random(0))
        self.assertEqual(len(pop), 12)
        self.assertFalse(pop.ranked)
        for tour in pop:
            self.assertTrue(tour.is_permutation(4))

    def test_rank_sorts_and_records_stats(self):
        pop = Population([Tour([3, 2, 1, 0]), Tour([0, 1, 2, 3]), Tour([0, 2, 1, 3])])
        pop.rank(self.matrix)
        self.assertEqual(pop.costs(), [4.0, 31.0, 40.0])
        self.assertEqual(pop.best().nodes, (0, 1, 2, 3))
        self.assertEqual(pop.stats.best, 4.0)
        self.assertEqual(pop.stats.worst, 40.0)
        self.assertAlmostEqual(pop.stats.mean, 25.0)

    def test_rank_is_stable_for_equal_costs(self):
        # Rotations share a cost, so they must keep insertion order.
        a = Tour([1, 2, 3, 0])
        b = Tour([3, 2, 1, 0])
        c = Tour([2, 3, 0, 1])
        d = Tour([0, 1, 2, 3])
        pop = Population([a, b, c, d])
        pop.rank(self.matrix)
        self.assertIs(pop[0], a)
        self.assertIs(pop[1], c)
        self.assertIs(pop[2], d)
        self.assertIs(pop[3], b)

    def test_rank_keeps_cached_costs(self):
        stale = Tour([3, 2, 1, 0], cost=1.0)
        pop = Population([Tour([0, 1, 2, 3]), stale])
        pop.rank(self.matrix)
        self.assertIs(pop.best(), stale)

    def test_select_parent_requires_ranking(self):
        pop = Population.initialize(5, 4, random.Random(1))
        with self.assertRaises(RuntimeError):
            pop.select_parent(random.Random(1))
        with self.assertRaises(RuntimeError):
            pop.best()

    def test_tournament_returns_best_of_draws(self):
        pop = Population.initialize(30, 4, random.Random(2))
        pop.rank(self.matrix)
        rng = random.Random(5)
        replay = random.Random(5)
        for _ in range(50):
            winner = pop.select_parent(rng, k=3)
            draws = [replay.randrange(30) for _ in range(3)]
            self.assertEqual(winner, min(draws))
            self.assertEqual(pop[winner].cached_cost, min(pop[i].cached_cost for i in draws))

    def test_large_tournament_favours_the_front(self):
        pop = Population.initialize(20, 4, random.Random(3))
        pop.rank(self.matrix)
        rng = random.Random(0)
        picks = [pop.select_parent(rng, k=10) for _ in range(200)]
        self.assertLess(sum(picks) / len(picks), 5)


if __name__ == "__main__":
    unittest.main()
