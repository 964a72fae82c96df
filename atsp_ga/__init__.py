"""
Genetic-algorithm search for short closed tours over asymmetric distance matrices.
"""

from .errors import ATSPError, InvalidConfig, InvalidIndex, MalformedInput
from .evolutionary import EngineState, EvolutionConfig, GeneticEngine, RunResult, run
from .matrix import DistanceMatrix
from .population import Population
from .report import GenerationReport
from .tour import Tour

__all__ = [
    "ATSPError",
    "DistanceMatrix",
    "EngineState",
    "EvolutionConfig",
    "GenerationReport",
    "GeneticEngine",
    "InvalidConfig",
    "InvalidIndex",
    "MalformedInput",
    "Population",
    "RunResult",
    "Tour",
    "run",
]
