from typing import List, Optional, Sequence

import networkx as nx
import numpy as np

from .errors import InvalidIndex, MalformedInput


class DistanceMatrix:
    """
    Read-only table of directed edge costs between node indices.
    Row is the origin, column the destination; the diagonal is ignored.
    """

    def __init__(self, weights, labels: Optional[Sequence[str]] = None):
        rows = _as_rows(weights)
        n = len(rows)
        if n < 2:
            raise MalformedInput(f"a distance matrix needs at least 2 nodes, got {n}")
        for i, row in enumerate(rows):
            if len(row) != n:
                raise MalformedInput(
                    f"distance matrix is not square: row {i} has {len(row)} entries, expected {n}"
                )
        try:
            mat = np.array(rows, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise MalformedInput(f"distance matrix contains non-numeric entries: {exc}") from exc
        np.fill_diagonal(mat, 0.0)
        if not np.all(np.isfinite(mat)):
            i, j = np.argwhere(~np.isfinite(mat))[0]
            raise MalformedInput(f"distance {i}->{j} is missing or not finite")
        if np.any(mat < 0):
            i, j = np.argwhere(mat < 0)[0]
            raise MalformedInput(f"distance {i}->{j} is negative ({mat[i, j]})")
        mat.setflags(write=False)
        self._weights = mat

        if labels is None:
            labels = [str(i) for i in range(n)]
        if isinstance(labels, (str, bytes)):
            raise MalformedInput("labels must be a sequence of names, not a single string")
        try:
            labels = [str(label) for label in labels]
        except TypeError as exc:
            raise MalformedInput(f"labels must be a sequence of names: {exc}") from exc
        if len(labels) != n:
            raise MalformedInput(f"got {len(labels)} labels for {n} nodes")
        if len(set(labels)) != n:
            raise MalformedInput("node labels must be unique")
        self._labels = tuple(labels)
        self._neighbors: Optional[List[List[int]]] = None

    @classmethod
    def from_graph(cls, graph: nx.Graph, weight: str = "weight") -> "DistanceMatrix":
        nodes = list(graph.nodes())
        idx_map = {n: i for i, n in enumerate(nodes)}
        mat = np.full((len(nodes), len(nodes)), np.nan)
        for u, v, w in graph.edges(data=weight):
            if w is None:
                raise MalformedInput(f"edge {u}->{v} has no '{weight}' attribute")
            mat[idx_map[u], idx_map[v]] = w
            if not graph.is_directed():
                mat[idx_map[v], idx_map[u]] = w
        return cls(mat, labels=[str(n) for n in nodes])

    @property
    def size(self) -> int:
        return self._weights.shape[0]

    def __len__(self) -> int:
        return self.size

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def labels(self) -> tuple:
        return self._labels

    def _check(self, i: int) -> None:
        if not 0 <= i < self.size:
            raise InvalidIndex(f"node index {i} outside [0, {self.size})")

    def cost(self, i: int, j: int) -> float:
        self._check(i)
        self._check(j)
        return float(self._weights[i, j])

    def tour_cost(self, sequence: Sequence[int]) -> float:
        idx = np.asarray(sequence, dtype=np.intp)
        if idx.size and (idx.min() < 0 or idx.max() >= self.size):
            raise InvalidIndex(f"tour visits a node outside [0, {self.size})")
        return float(self._weights[idx, np.roll(idx, -1)].sum())

    def nearest_neighbors(self, i: int) -> List[int]:
        """Other nodes ordered by ascending cost of the edge leaving `i`."""
        self._check(i)
        if self._neighbors is None:
            order = np.argsort(self._weights, axis=1, kind="stable")
            self._neighbors = [
                [int(j) for j in row if j != origin] for origin, row in enumerate(order)
            ]
        return self._neighbors[i]

    def is_symmetric(self) -> bool:
        return bool(np.array_equal(self._weights, self._weights.T))

    def __repr__(self) -> str:
        return f"DistanceMatrix(size={self.size}, symmetric={self.is_symmetric()})"


def _as_rows(weights) -> List[Sequence]:
    if isinstance(weights, np.ndarray):
        if weights.ndim != 2:
            raise MalformedInput(f"distance matrix must be 2-dimensional, got shape {weights.shape}")
        return list(weights)
    try:
        rows = list(weights)
        for row in rows:
            len(row)
    except TypeError as exc:
        raise MalformedInput("distance matrix must be a sequence of rows") from exc
    return rows
