import random
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Type

from .errors import InvalidConfig
from .matrix import DistanceMatrix


class CrossoverOperator(ABC):
    name: str = "base"

    @abstractmethod
    def apply(
        self,
        first: Sequence[int],
        second: Sequence[int],
        rng: random.Random,
        matrix: Optional[DistanceMatrix] = None,
    ) -> List[int]:
        raise NotImplementedError


class MutationOperator(ABC):
    name: str = "base"

    @abstractmethod
    def apply(
        self,
        nodes: List[int],
        rate: float,
        rng: random.Random,
        matrix: Optional[DistanceMatrix] = None,
    ) -> bool:
        """Mutate `nodes` in place and report whether anything moved."""
        raise NotImplementedError

    @classmethod
    def configure(cls, neighbors: int = 4, best_out_of: int = 10) -> "MutationOperator":
        return cls()


def _cut_points(n: int, rng: random.Random):
    a, b = sorted(rng.sample(range(n + 1), 2))
    return a, b


class OrderCrossover(CrossoverOperator):
    """
    Copies a slice of the first parent verbatim and fills the remaining
    slots, left to right, with the missing nodes in second-parent order.
    """

    name = "order"

    def apply(self, first, second, rng, matrix=None):
        n = len(first)
        a, b = _cut_points(n, rng)
        kept = first[a:b]
        placed = set(kept)
        filler = iter([node for node in second if node not in placed])
        child = []
        for pos in range(n):
            if a <= pos < b:
                child.append(first[pos])
            else:
                child.append(next(filler))
        return child


class PartiallyMappedCrossover(CrossoverOperator):
    name = "pmx"

    def apply(self, first, second, rng, matrix=None):
        n = len(first)
        a, b = _cut_points(n, rng)
        child: List[Optional[int]] = [None] * n
        child[a:b] = first[a:b]
        pos_in_second = {node: i for i, node in enumerate(second)}
        segment = set(first[a:b])
        for i in range(a, b):
            node = second[i]
            if node in segment:
                continue
            # Follow the mapping until we land outside the copied slice.
            pos = i
            while a <= pos < b:
                pos = pos_in_second[first[pos]]
            child[pos] = node
        for i in range(n):
            if child[i] is None:
                child[i] = second[i]
        return child


class GreedyEdgeCrossover(CrossoverOperator):
    """
    Builds the child edge by edge from the first parent's start node. At each
    step the cheaper directed successor among both parents is taken; if both
    are already used, the nearest unvisited neighbour is taken instead.
    """

    name = "greedy"

    def apply(self, first, second, rng, matrix=None):
        if matrix is None:
            raise ValueError("greedy crossover needs the distance matrix")
        n = len(first)
        succ_a = {first[i]: first[(i + 1) % n] for i in range(n)}
        succ_b = {second[i]: second[(i + 1) % n] for i in range(n)}
        child = [first[0]]
        remaining = set(first)
        remaining.discard(first[0])
        while remaining:
            last = child[-1]
            a, b = succ_a[last], succ_b[last]
            # Ties go to the second parent's successor.
            options = (a, b) if matrix.cost(last, a) < matrix.cost(last, b) else (b, a)
            nxt = next((node for node in options if node in remaining), None)
            if nxt is None:
                nxt = next(node for node in matrix.nearest_neighbors(last) if node in remaining)
            child.append(nxt)
            remaining.discard(nxt)
        return child


class SwapMutation(MutationOperator):
    name = "swap"

    def apply(self, nodes, rate, rng, matrix=None):
        n = len(nodes)
        if n < 2 or rate <= 0:
            return False
        changed = False
        for i in range(n):
            if rng.random() < rate:
                j = rng.randrange(n - 1)
                if j >= i:
                    j += 1
                nodes[i], nodes[j] = nodes[j], nodes[i]
                changed = True
        return changed


class InversionMutation(MutationOperator):
    name = "inversion"

    def apply(self, nodes, rate, rng, matrix=None):
        n = len(nodes)
        if n < 2 or rate <= 0:
            return False
        changed = False
        for i in range(n):
            if rng.random() < rate:
                j = rng.randrange(n)
                lo, hi = min(i, j), max(i, j)
                nodes[lo : hi + 1] = nodes[lo : hi + 1][::-1]
                changed = changed or hi > lo
        return changed


class NeighborMutation(MutationOperator):
    """
    Local move fired with probability `rate` per tour. Each candidate inverts
    a random segment, then swaps a random node with one of its `neighbors`
    nearest successors. The cheapest of `best_out_of` candidates is kept.
    """

    name = "neighbor"

    def __init__(self, neighbors: int = 4, best_out_of: int = 10):
        self.neighbors = neighbors
        self.best_out_of = best_out_of

    @classmethod
    def configure(cls, neighbors: int = 4, best_out_of: int = 10) -> "NeighborMutation":
        return cls(neighbors=neighbors, best_out_of=best_out_of)

    def _candidate(self, nodes, rng, matrix):
        n = len(nodes)
        child = list(nodes)
        i, j = sorted((rng.randrange(n), rng.randrange(n)))
        child[i : j + 1] = child[i : j + 1][::-1]
        pos = rng.randrange(n)
        node = child[pos]
        close = matrix.nearest_neighbors(node)
        other = close[rng.randrange(min(self.neighbors, len(close)))]
        other_pos = child.index(other)
        child[pos], child[other_pos] = other, node
        return child

    def apply(self, nodes, rate, rng, matrix=None):
        if matrix is None:
            raise ValueError("neighbor mutation needs the distance matrix")
        n = len(nodes)
        if n < 2 or rate <= 0 or rng.random() >= rate:
            return False
        best, best_cost = None, None
        for _ in range(max(1, self.best_out_of)):
            child = self._candidate(nodes, rng, matrix)
            cost = matrix.tour_cost(child)
            if best is None or cost < best_cost:
                best, best_cost = child, cost
        changed = best != list(nodes)
        nodes[:] = best
        return changed


CROSSOVERS: Dict[str, Type[CrossoverOperator]] = {
    cls.name: cls for cls in (OrderCrossover, PartiallyMappedCrossover, GreedyEdgeCrossover)
}
MUTATIONS: Dict[str, Type[MutationOperator]] = {
    cls.name: cls for cls in (SwapMutation, InversionMutation, NeighborMutation)
}


def get_crossover(name: str) -> CrossoverOperator:
    if name not in CROSSOVERS:
        raise InvalidConfig("crossover", name, f"expected one of {sorted(CROSSOVERS)}")
    return CROSSOVERS[name]()


def get_mutation(name: str, neighbors: int = 4, best_out_of: int = 10) -> MutationOperator:
    if name not in MUTATIONS:
        raise InvalidConfig("mutation", name, f"expected one of {sorted(MUTATIONS)}")
    return MUTATIONS[name].configure(neighbors=neighbors, best_out_of=best_out_of)
