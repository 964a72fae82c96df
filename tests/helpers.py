from atsp_ga.matrix import DistanceMatrix

# Directed ring 0 -> 1 -> 2 -> 3 -> 0 costs 1 per edge; every other edge costs 10.
# The only optimal cycle therefore costs 4, and its reverse costs 40.
RING_WEIGHTS = [
    [0, 1, 10, 10],
    [10, 0, 1, 10],
    [10, 10, 0, 1],
    [1, 10, 10, 0],
]
RING_OPTIMUM = 4.0


def ring_matrix() -> DistanceMatrix:
    return DistanceMatrix(RING_WEIGHTS, labels=["A", "B", "C", "D"])
