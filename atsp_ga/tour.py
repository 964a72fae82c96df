import random
from typing import Iterable, List, Optional, Sequence, Tuple

from .matrix import DistanceMatrix
from .operators import CrossoverOperator, MutationOperator, OrderCrossover, SwapMutation


class Tour:
    """
    A closed route: a permutation of node indices with an implicit edge from
    the last node back to the first. The cost is cached until the sequence
    changes.
    """

    __slots__ = ("_nodes", "_cost")

    def __init__(self, nodes: Iterable[int], cost: Optional[float] = None):
        self._nodes: List[int] = [int(n) for n in nodes]
        self._cost = cost

    @staticmethod
    def new_random(n: int, rng: random.Random) -> "Tour":
        nodes = list(range(n))
        rng.shuffle(nodes)
        return Tour(nodes)

    @property
    def nodes(self) -> Tuple[int, ...]:
        return tuple(self._nodes)

    @property
    def cached_cost(self) -> Optional[float]:
        return self._cost

    def assign_cost(self, value: float) -> None:
        self._cost = float(value)

    def cost(self, matrix: DistanceMatrix) -> float:
        if self._cost is None:
            self._cost = matrix.tour_cost(self._nodes)
        return self._cost

    def crossover(
        self,
        other: "Tour",
        rng: random.Random,
        operator: Optional[CrossoverOperator] = None,
        matrix: Optional[DistanceMatrix] = None,
    ) -> "Tour":
        operator = operator or OrderCrossover()
        return Tour(operator.apply(self._nodes, other._nodes, rng, matrix))

    def mutate(
        self,
        rate: float,
        rng: random.Random,
        operator: Optional[MutationOperator] = None,
        matrix: Optional[DistanceMatrix] = None,
    ) -> None:
        operator = operator or SwapMutation()
        if operator.apply(self._nodes, rate, rng, matrix):
            self._cost = None

    def rotated(self, start: int) -> "Tour":
        """Same cycle, listed from node `start`."""
        k = self._nodes.index(start)
        return Tour(self._nodes[k:] + self._nodes[:k], self._cost)

    def is_permutation(self, n: Optional[int] = None) -> bool:
        n = len(self._nodes) if n is None else n
        return sorted(self._nodes) == list(range(n))

    def copy(self) -> "Tour":
        return Tour(self._nodes, self._cost)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes)

    def __getitem__(self, idx):
        return self._nodes[idx]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tour):
            return NotImplemented
        return self._nodes == other._nodes

    # Mutable, so unhashable.
    __hash__ = None

    def __repr__(self) -> str:
        cost = "?" if self._cost is None else f"{self._cost:.2f}"
        return f"Tour({self._nodes}, cost={cost})"


def tour_from_labels(matrix: DistanceMatrix, labels: Sequence[str]) -> Tour:
    index = {label: i for i, label in enumerate(matrix.labels)}
    return Tour(index[str(label)] for label in labels)
