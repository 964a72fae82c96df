import argparse
import sys
import time
from pathlib import Path

from atsp_ga.data import load_dataset, node_labels, random_matrix, save_json_dataset
from atsp_ga.errors import ATSPError
from atsp_ga.evaluation import optimality_gap
from atsp_ga.evolutionary import EvolutionConfig, GeneticEngine
from atsp_ga.operators import CROSSOVERS, MUTATIONS
from atsp_ga.report import (
    GenerationLogWriter,
    format_cost,
    format_matrix,
    format_report_line,
    format_solution,
)


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def _config_from_args(args) -> EvolutionConfig:
    return EvolutionConfig(
        population_size=args.population_size,
        elite_count=args.elite_count,
        tournament_size=args.tournament_size,
        mutation_rate=args.mutation_rate,
        crossover_rate=args.crossover_rate,
        max_generations=args.generations,
        stall_limit=args.stall_limit,
        crossover=args.crossover,
        mutation=args.mutation,
        neighbors=args.neighbors,
        best_out_of=args.best_out_of,
        random_seed=args.seed,
        device=args.device,
    )


def run(args) -> None:
    t0 = time.perf_counter()
    log(f"loading dataset from {args.dataset}")
    instance = load_dataset(args.dataset)
    matrix = instance.matrix
    kind = "symmetric" if matrix.is_symmetric() else "asymmetric"
    log(f"loaded {instance.name}: {matrix.size} nodes ({kind}) in {time.perf_counter() - t0:.2f}s")

    cfg = _config_from_args(args)
    engine = GeneticEngine(matrix, cfg)
    log(
        f"population={cfg.population_size} elites={cfg.elite_count} tournament={cfg.tournament_size} "
        f"mutation={cfg.mutation}@{cfg.mutation_rate} crossover={cfg.crossover} "
        f"max_generations={cfg.max_generations} stall_limit={cfg.stall_limit}"
    )

    t_run = time.perf_counter()
    with GenerationLogWriter(Path(args.log_file), matrix.labels, header=format_matrix(matrix)) as writer:
        for report in engine.generations():
            writer(report)
            if report.generation % args.display_interval == 0:
                print(format_report_line(report, matrix.labels), flush=True)
        solution = format_solution(engine.best_tour.rotated(0), engine.best_cost, matrix.labels)
        writer.write(solution)
    elapsed = time.perf_counter() - t_run
    log(f"{engine.state.value} after {engine.generation} generations in {elapsed:.2f}s (log: {args.log_file})")
    if instance.optimum is not None:
        gap = optimality_gap(engine.best_cost, instance.optimum)
        log(f"known optimum {format_cost(instance.optimum)}, gap={gap:.2%}")
    print(solution)


def show(args) -> None:
    instance = load_dataset(args.dataset)
    print(f"{instance.name} ({instance.matrix.size} nodes)")
    print(format_matrix(instance.matrix))


def generate(args) -> None:
    labels = node_labels(args.nodes) if args.letters else None
    matrix = random_matrix(args.nodes, seed=args.seed, low=args.low, high=args.high, labels=labels)
    save_json_dataset(matrix, Path(args.output), name=Path(args.output).stem)
    log(f"wrote {args.nodes}-node dataset to {args.output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Genetic algorithm for the asymmetric TSP")
    subparsers = parser.add_subparsers(dest="command", required=True)

    defaults = EvolutionConfig()
    run_parser = subparsers.add_parser("run", help="Search for a short tour over a dataset")
    run_parser.add_argument("-d", "--dataset", default="dataset.json", help="JSON or TSPLIB dataset")
    run_parser.add_argument("-l", "--log-file", default="logs.txt", help="File receiving one line per generation")
    run_parser.add_argument("-g", "--generations", type=int, default=defaults.max_generations)
    run_parser.add_argument("-p", "--population-size", type=int, default=defaults.population_size)
    run_parser.add_argument("-e", "--elite-count", type=int, default=defaults.elite_count)
    run_parser.add_argument("-k", "--tournament-size", type=int, default=defaults.tournament_size)
    run_parser.add_argument("-m", "--mutation-rate", type=float, default=defaults.mutation_rate)
    run_parser.add_argument("-c", "--crossover-rate", type=float, default=defaults.crossover_rate)
    run_parser.add_argument("-s", "--stall-limit", type=int, default=defaults.stall_limit)
    run_parser.add_argument("--crossover", choices=sorted(CROSSOVERS), default=defaults.crossover)
    run_parser.add_argument("--mutation", choices=sorted(MUTATIONS), default=defaults.mutation)
    run_parser.add_argument(
        "-n", "--neighbors", type=int, default=defaults.neighbors,
        help="Nearest neighbours the neighbor mutation swaps with",
    )
    run_parser.add_argument(
        "-b", "--best-out-of", type=int, default=defaults.best_out_of,
        help="Candidates tried per neighbor mutation",
    )
    run_parser.add_argument("--seed", type=int, default=None)
    run_parser.add_argument("--device", default=None, help="Evaluate costs with torch on this device, e.g. cpu or cuda:0")
    run_parser.add_argument(
        "-i",
        "--display-interval",
        type=int,
        default=20,
        help="Print a progress line every N generations",
    )
    run_parser.set_defaults(func=run)

    show_parser = subparsers.add_parser("show", help="Print a dataset as a table")
    show_parser.add_argument("dataset")
    show_parser.set_defaults(func=show)

    gen_parser = subparsers.add_parser("generate", help="Write a random asymmetric dataset as JSON")
    gen_parser.add_argument("output")
    gen_parser.add_argument("-n", "--nodes", type=int, default=20)
    gen_parser.add_argument("--seed", type=int, default=None)
    gen_parser.add_argument("--low", type=float, default=1.0)
    gen_parser.add_argument("--high", type=float, default=100.0)
    gen_parser.add_argument("--letters", action="store_true", help="Label nodes A, B, ... instead of 0, 1, ...")
    gen_parser.set_defaults(func=generate)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "display_interval", 1) < 1:
        print("error: --display-interval must be >= 1", file=sys.stderr)
        return 2
    try:
        args.func(args)
    except (ATSPError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
