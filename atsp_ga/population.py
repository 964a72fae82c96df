import random
from typing import Iterator, List, Optional

from .evaluation import NumpyEvaluator, PopulationStats, aggregate_costs
from .matrix import DistanceMatrix
from .tour import Tour


class Population:
    """
    The tours of one generation. After `rank` the tours are ordered by
    ascending cost, ties kept in insertion order.
    """

    def __init__(self, tours: List[Tour]):
        self.tours: List[Tour] = list(tours)
        self.stats: Optional[PopulationStats] = None

    @classmethod
    def initialize(cls, size: int, n: int, rng: random.Random) -> "Population":
        return cls([Tour.new_random(n, rng) for _ in range(size)])

    @property
    def ranked(self) -> bool:
        return self.stats is not None

    def rank(self, matrix: DistanceMatrix, evaluator=None) -> None:
        evaluator = evaluator or NumpyEvaluator()
        pending = [t for t in self.tours if t.cached_cost is None]
        costs = evaluator(matrix, [t.nodes for t in pending])
        for tour, cost in zip(pending, costs):
            tour.assign_cost(cost)
        # sorted() is stable, so equal costs keep insertion order.
        self.tours = sorted(self.tours, key=lambda t: t.cached_cost)
        self.stats = aggregate_costs(self.costs())

    def costs(self) -> List[float]:
        return [t.cached_cost for t in self.tours]

    def _require_ranked(self) -> None:
        if not self.ranked:
            raise RuntimeError("population must be ranked first")

    def select_parent(self, rng: random.Random, k: int = 3) -> int:
        """Tournament of `k` draws with replacement; returns the winner's index."""
        self._require_ranked()
        # Lowest index is lowest cost once ranked.
        return min(rng.randrange(len(self.tours)) for _ in range(k))

    def best(self) -> Tour:
        self._require_ranked()
        return self.tours[0]

    def __len__(self) -> int:
        return len(self.tours)

    def __iter__(self) -> Iterator[Tour]:
        return iter(self.tours)

    def __getitem__(self, idx) -> Tour:
        return self.tours[idx]
