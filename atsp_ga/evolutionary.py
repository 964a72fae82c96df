import enum
import random
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from .errors import InvalidConfig
from .evaluation import build_evaluator
from .matrix import DistanceMatrix
from .operators import get_crossover, get_mutation
from .population import Population
from .report import GenerationReport
from .tour import Tour


@dataclass
class EvolutionConfig:
    population_size: int = 200
    elite_count: int = 2
    tournament_size: int = 4
    mutation_rate: float = 0.05
    crossover_rate: float = 1.0
    max_generations: int = 500
    stall_limit: int = 100
    crossover: str = "order"
    mutation: str = "swap"
    neighbors: int = 4
    best_out_of: int = 10
    random_seed: Optional[int] = None
    device: Optional[str] = None

    def validate(self) -> None:
        def at_least(name: str, minimum: int) -> None:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
                raise InvalidConfig(name, value, f"must be an integer >= {minimum}")

        def probability(name: str) -> None:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise InvalidConfig(name, value, "must be a probability in [0, 1]")

        at_least("population_size", 1)
        at_least("elite_count", 0)
        if self.elite_count > self.population_size:
            raise InvalidConfig(
                "elite_count",
                self.elite_count,
                f"cannot exceed population_size={self.population_size}",
            )
        at_least("tournament_size", 1)
        probability("mutation_rate")
        probability("crossover_rate")
        at_least("max_generations", 1)
        at_least("stall_limit", 1)
        at_least("neighbors", 1)
        at_least("best_out_of", 1)
        get_crossover(self.crossover)
        get_mutation(self.mutation, self.neighbors, self.best_out_of)


class EngineState(enum.Enum):
    INITIALIZING = "initializing"
    EVOLVING = "evolving"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"

    @property
    def terminal(self) -> bool:
        return self in (EngineState.CONVERGED, EngineState.EXHAUSTED)


@dataclass
class RunResult:
    best_tour: Tour
    best_cost: float
    final_report: GenerationReport
    state: EngineState
    generations: int


ReportCallback = Callable[[GenerationReport], None]


class GeneticEngine:
    """
    Generational GA over a fixed distance matrix.

    Generation 0 is the random initial population. Each later generation
    keeps the top `elite_count` tours by value and fills the remaining slots
    with mutated crossover children of tournament-selected parents. The run
    converges once the best cost seen so far has not strictly improved for
    `stall_limit` generations, or is exhausted after `max_generations`.
    """

    def __init__(self, matrix: DistanceMatrix, config: EvolutionConfig, rng: random.Random = None):
        if not isinstance(matrix, DistanceMatrix):
            matrix = DistanceMatrix(matrix)
        config.validate()
        self.matrix = matrix
        self.cfg = config
        self.rng = rng or random.Random(config.random_seed)
        self.crossover_op = get_crossover(config.crossover)
        self.mutation_op = get_mutation(config.mutation, config.neighbors, config.best_out_of)
        self.evaluator = build_evaluator(config.device)
        self.state = EngineState.INITIALIZING
        self.generation = 0
        self.stall = 0
        self.population: Optional[Population] = None
        self._best: Optional[Tour] = None

    @property
    def best_tour(self) -> Optional[Tour]:
        return None if self._best is None else self._best.copy()

    @property
    def best_cost(self) -> float:
        return float("inf") if self._best is None else self._best.cached_cost

    def _rank_and_report(self) -> GenerationReport:
        self.population.rank(self.matrix, self.evaluator)
        leader = self.population.best()
        improved = self._best is None or leader.cached_cost < self._best.cached_cost
        if improved:
            self._best = leader.copy()
            self.stall = 0
        else:
            self.stall += 1
        stats = self.population.stats
        return GenerationReport(
            generation=self.generation,
            best_tour=leader.copy(),
            best_cost=stats.best,
            mean_cost=stats.mean,
            worst_cost=stats.worst,
            incumbent_cost=self._best.cached_cost,
        )

    def initialize(self) -> GenerationReport:
        if self.state is not EngineState.INITIALIZING:
            raise RuntimeError(f"engine already {self.state.value}")
        self.population = Population.initialize(self.cfg.population_size, self.matrix.size, self.rng)
        report = self._rank_and_report()
        self.state = EngineState.EVOLVING
        return report

    def _make_child(self) -> Tour:
        pop = self.population
        first = pop[pop.select_parent(self.rng, self.cfg.tournament_size)]
        second = pop[pop.select_parent(self.rng, self.cfg.tournament_size)]
        if self.rng.random() < self.cfg.crossover_rate:
            child = first.crossover(second, self.rng, self.crossover_op, self.matrix)
        else:
            child = first.copy()
        child.mutate(self.cfg.mutation_rate, self.rng, self.mutation_op, self.matrix)
        return child

    def breed(self) -> Population:
        elites = [t.copy() for t in self.population.tours[: self.cfg.elite_count]]
        children: List[Tour] = [
            self._make_child() for _ in range(self.cfg.population_size - len(elites))
        ]
        return Population(elites + children)

    def transition(self) -> EngineState:
        if self.stall >= self.cfg.stall_limit:
            return EngineState.CONVERGED
        if self.generation >= self.cfg.max_generations:
            return EngineState.EXHAUSTED
        return EngineState.EVOLVING

    def step(self) -> GenerationReport:
        if self.state is not EngineState.EVOLVING:
            raise RuntimeError(f"cannot step an engine that is {self.state.value}")
        self.population = self.breed()
        self.generation += 1
        report = self._rank_and_report()
        self.state = self.transition()
        return report

    def generations(self) -> Iterator[GenerationReport]:
        """Yields one report per generation until a terminal state is reached."""
        if self.state is EngineState.INITIALIZING:
            yield self.initialize()
        while self.state is EngineState.EVOLVING:
            yield self.step()

    def run(self, on_report: Optional[ReportCallback] = None) -> RunResult:
        report = None
        for report in self.generations():
            if on_report is not None:
                on_report(report)
        if report is None:
            raise RuntimeError(f"engine already {self.state.value}")
        return RunResult(
            best_tour=self.best_tour,
            best_cost=self.best_cost,
            final_report=report,
            state=self.state,
            generations=self.generation,
        )


def run(matrix, config: EvolutionConfig, on_report: Optional[ReportCallback] = None) -> RunResult:
    return GeneticEngine(matrix, config).run(on_report)
