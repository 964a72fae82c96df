from atsp_ga.data import node_labels, random_matrix
from atsp_ga.evolutionary import EvolutionConfig, GeneticEngine
from atsp_ga.report import format_solution


def main():
    n = 25
    matrix = random_matrix(n, seed=7, labels=node_labels(n))

    cfg = EvolutionConfig(
        population_size=60,
        elite_count=2,
        tournament_size=4,
        mutation_rate=0.02,
        max_generations=300,
        stall_limit=60,
        random_seed=123,
    )
    engine = GeneticEngine(matrix, cfg)
    for report in engine.generations():
        if report.generation % 25 == 0:
            print(f"gen {report.generation}: best={report.best_cost:.0f} mean={report.mean_cost:.1f}")
    print(f"stopped: {engine.state.value} at generation {engine.generation}")
    print(format_solution(engine.best_tour.rotated(0), engine.best_cost, matrix.labels))


if __name__ == "__main__":
    main()
