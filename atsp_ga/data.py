import json
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import networkx as nx
import numpy as np
import tsplib95
from tsplib95.exceptions import TsplibError

from .errors import ATSPError, MalformedInput
from .matrix import DistanceMatrix
from .tour import tour_from_labels

# Key pairs accepted in JSON datasets; the second is the older points layout.
JSON_KEYS = (("labels", "distance_matrix"), ("points_labels", "points_distances"))


@dataclass
class Instance:
    name: str
    path: Optional[Path]
    matrix: DistanceMatrix
    optimum: Optional[float]


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _load_optimum(matrix: DistanceMatrix, path: Path) -> Optional[float]:
    # Tour files list 1-based TSPLIB ids, which are also the matrix labels.
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        try:
            tour_file = tsplib95.parse(candidate.read_text())
            tour = tour_from_labels(matrix, tour_file.tours[0])
            if not tour.is_permutation(matrix.size):
                continue
            return matrix.tour_cost(tour.nodes)
        except (TsplibError, ATSPError, KeyError, IndexError, ValueError):
            continue
    return None


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedInput(f"{path}: not a UTF-8 text file ({exc})") from exc


def load_json_dataset(path: Path) -> Instance:
    try:
        payload = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        raise MalformedInput(f"{path}: not valid JSON ({exc})") from exc
    if not isinstance(payload, dict):
        raise MalformedInput(f"{path}: expected a JSON object")
    for labels_key, matrix_key in JSON_KEYS:
        if matrix_key in payload:
            break
    else:
        raise MalformedInput(f"{path}: expected an object with 'labels' and 'distance_matrix'")

    labels = payload.get(labels_key)
    if labels is not None and not isinstance(labels, list):
        raise MalformedInput(f"{path}: '{labels_key}' must be a list, got {type(labels).__name__}")
    optimum = payload.get("optimum")
    if optimum is not None and (isinstance(optimum, bool) or not isinstance(optimum, numbers.Real)):
        raise MalformedInput(f"{path}: 'optimum' must be a number or null, got {optimum!r}")

    matrix = DistanceMatrix(payload[matrix_key], labels=labels)
    name = payload.get("name") or path.stem
    return Instance(
        name=str(name),
        path=path,
        matrix=matrix,
        optimum=None if optimum is None else float(optimum),
    )


def load_tsplib_dataset(path: Path) -> Instance:
    try:
        problem = tsplib95.load(path)
        graph = problem.get_graph()
    except (TsplibError, UnicodeDecodeError, ValueError, KeyError, IndexError, TypeError) as exc:
        raise MalformedInput(f"{path}: unable to read TSPLIB problem ({exc})") from exc
    if len(graph) == 0:
        raise MalformedInput(f"{path}: TSPLIB problem has no nodes")
    if problem.type == "ATSP" and not graph.is_directed():
        raise MalformedInput(f"{path}: ATSP problem did not yield directed edges")
    # Explicit-matrix problems number nodes from 0; relabel to 1-based TSPLIB ids.
    offset = 1 - min(graph.nodes())
    if offset:
        graph = nx.relabel_nodes(graph, {n: n + offset for n in graph.nodes()})
    matrix = DistanceMatrix.from_graph(graph)
    optimum = _load_optimum(matrix, path)
    return Instance(name=problem.name or path.stem, path=path, matrix=matrix, optimum=optimum)


def load_dataset(path) -> Instance:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"dataset {path} does not exist")
    if path.suffix.lower() == ".json":
        return load_json_dataset(path)
    return load_tsplib_dataset(path)


def random_matrix(
    n: int,
    seed: Optional[int] = None,
    low: float = 1.0,
    high: float = 100.0,
    labels: Optional[Sequence[str]] = None,
) -> DistanceMatrix:
    """Uniform random asymmetric costs rounded to whole units."""
    rng = np.random.default_rng(seed)
    weights = np.round(rng.random((n, n)) * (high - low) + low)
    return DistanceMatrix(weights, labels=labels)


def save_json_dataset(matrix: DistanceMatrix, path: Path, name: Optional[str] = None) -> None:
    payload = {
        "labels": list(matrix.labels),
        "distance_matrix": matrix.weights.tolist(),
    }
    if name:
        payload["name"] = name
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))


def node_labels(n: int) -> List[str]:
    """Spreadsheet-style labels: A..Z, AA, AB, ..."""
    labels = []
    for i in range(n):
        label = ""
        i += 1
        while i:
            i, rem = divmod(i - 1, 26)
            label = chr(ord("A") + rem) + label
        labels.append(label)
    return labels
