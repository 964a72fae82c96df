import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import torch

from .matrix import DistanceMatrix


@dataclass
class PopulationStats:
    best: float
    worst: float
    mean: float


def aggregate_costs(costs: Sequence[float]) -> PopulationStats:
    if not len(costs):
        return PopulationStats(best=float("inf"), worst=float("inf"), mean=float("inf"))
    arr = np.asarray(costs, dtype=np.float64)
    return PopulationStats(best=float(arr.min()), worst=float(arr.max()), mean=float(arr.mean()))


def optimality_gap(cost: float, optimum: Optional[float]) -> float:
    if optimum is None or math.isclose(optimum, 0.0):
        return float("inf")
    return (cost - optimum) / optimum


def _tour_costs_numpy(dist: np.ndarray, sequences: Sequence[Sequence[int]]) -> np.ndarray:
    idx = np.asarray(sequences, dtype=np.intp)
    return dist[idx, np.roll(idx, -1, axis=1)].sum(axis=1)


def _tour_costs_torch(dist: torch.Tensor, sequences: Sequence[Sequence[int]]) -> np.ndarray:
    idx = torch.tensor(sequences, device=dist.device, dtype=torch.long)
    return dist[idx, idx.roll(-1, dims=1)].sum(dim=1).cpu().numpy()


class NumpyEvaluator:
    name = "numpy"

    def __call__(self, matrix: DistanceMatrix, sequences: Sequence[Sequence[int]]) -> List[float]:
        if not sequences:
            return []
        return _tour_costs_numpy(matrix.weights, sequences).tolist()


class TorchEvaluator:
    """Evaluates a whole batch of tours at once on a torch device."""

    name = "torch"

    def __init__(self, device="cpu"):
        self.device = torch.device(device)
        self._matrix: Optional[DistanceMatrix] = None
        self._dist: Optional[torch.Tensor] = None

    def _dist_for(self, matrix: DistanceMatrix) -> torch.Tensor:
        if self._matrix is not matrix:
            self._dist = torch.tensor(matrix.weights.copy(), dtype=torch.float64, device=self.device)
            self._matrix = matrix
        return self._dist

    def __call__(self, matrix: DistanceMatrix, sequences: Sequence[Sequence[int]]) -> List[float]:
        if not sequences:
            return []
        return _tour_costs_torch(self._dist_for(matrix), sequences).tolist()


def build_evaluator(device: Optional[str] = None):
    if device is None:
        return NumpyEvaluator()
    return TorchEvaluator(device)
