import concurrent.futures
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .matrix import DistanceMatrix
from .tour import Tour


@dataclass(frozen=True)
class GenerationReport:
    generation: int
    best_tour: Tour
    best_cost: float
    mean_cost: float
    worst_cost: float
    incumbent_cost: float


def format_cost(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_tour(tour: Sequence[int], labels: Optional[Sequence[str]] = None, sep: str = " -> ") -> str:
    if labels is None:
        return sep.join(str(n) for n in tour)
    return sep.join(labels[n] for n in tour)


def format_report_line(report: GenerationReport, labels: Optional[Sequence[str]] = None) -> str:
    return (
        f"gen {report.generation}: best={format_cost(report.best_cost)} "
        f"mean={report.mean_cost:.2f} worst={format_cost(report.worst_cost)} "
        f"tour={format_tour(report.best_tour, labels)}"
    )


def format_solution(tour: Tour, cost: float, labels: Optional[Sequence[str]] = None) -> str:
    body = f"{format_tour(tour, labels)} · {format_cost(cost)}"
    title = "─ BEST SOLUTION "
    width = max(len(body), len(title))
    return "\n".join(
        [
            f"┌{title}{'─' * (width - len(title) + 2)}┐",
            f"│ {body:<{width}} │",
            f"└─{'─' * width}─┘",
        ]
    )


def format_matrix(matrix: DistanceMatrix) -> str:
    """Labelled table of the costs; the ignored diagonal shows as '_'."""
    labels = matrix.labels
    cells = [
        ["_" if i == j else format_cost(matrix.weights[i, j]) for j in range(matrix.size)]
        for i in range(matrix.size)
    ]
    label_w = max(len(label) for label in labels)
    col_w = max(label_w, max(len(c) for row in cells for c in row))
    rule = "─" * (matrix.size * (col_w + 1) + 1)
    lines = [" " * (label_w + 3) + " ".join(f"{label:>{col_w}}" for label in labels)]
    lines.append(" " * label_w + " ┌" + rule + "┐")
    for label, row in zip(labels, cells):
        lines.append(f"{label:>{label_w}} │ " + " ".join(f"{c:>{col_w}}" for c in row) + " │")
    lines.append(" " * label_w + " └" + rule + "┘")
    return "\n".join(lines)


class GenerationLogWriter:
    """
    Writes one line per generation to a text file. Lines are queued on a
    single background worker so the caller never waits on disk I/O.
    """

    def __init__(self, path: Path, labels: Optional[Sequence[str]] = None, header: Optional[str] = None):
        self.path = Path(path)
        self.labels = labels
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("w", encoding="utf-8")
        self._pool = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        self._pending = []
        if header:
            self.write(header)

    def write(self, text: str) -> None:
        self._pending = [f for f in self._pending if not f.done() or f.exception() is not None]
        self._pending.append(self._pool.submit(self._write_line, text))

    def _write_line(self, text: str) -> None:
        self._fh.write(text.rstrip("\n") + "\n")

    def __call__(self, report: GenerationReport) -> None:
        self.write(format_report_line(report, self.labels))

    def close(self) -> None:
        self._pool.shutdown(wait=True)
        self._fh.close()
        # Surface any write failure now that the worker is drained.
        for fut in self._pending:
            fut.result()
        self._pending = []

    def __enter__(self) -> "GenerationLogWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
