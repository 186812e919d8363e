"""
Cluster a synthetic 5-dimensional dataset and print progress per round.

Each point draws its five coordinates uniformly from fixed per-dimension
ranges, so the data has no real cluster structure. The run only shows the
protocol: load, initialize, then assign and recompute until nothing moves.
"""

import sys
import torch

from lloyd import ClusteringEngine, StreamSink

N_DIMENSIONS = 5
N_POINTS = 1000

# (low, width) per dimension
RANGES = [(30, 30), (50, 100), (100, 50), (25, 150), (10, 10)]


def generate_flat_data(n_points=N_POINTS, seed=0xDEADBEEF):
    """Flat float32 tensor of n_points * 5 integer-valued coordinates."""
    generator = torch.Generator().manual_seed(seed)
    columns = [
        torch.randint(0, width, (n_points,), generator=generator).float() + low
        for low, width in RANGES
    ]
    return torch.stack(columns, dim=1).flatten()


def main(max_rounds=100, verbose=False):
    data = generate_flat_data()

    sink = StreamSink(sys.stdout) if verbose else None
    engine = ClusteringEngine(random_state=0, diagnostics=sink)

    n_values = engine.load(data, stride=N_DIMENSIONS)
    print(f"Loaded {n_values // N_DIMENSIONS} points ({n_values} values)")

    engine.initialize()
    print(f"Initialized {engine.n_clusters} clusters")

    for round_number in range(max_rounds):
        moved = engine.assign_round()
        engine.recompute_centroids()
        print(f"Round {round_number:3d}: {moved} points moved")
        if moved == 0:
            break
    else:
        print(f"Stopped after {max_rounds} rounds without converging")

    print(f"Cluster sizes: {engine.cluster_sizes().tolist()}")
    print(f"Inertia: {engine.inertia:.2f}")


if __name__ == "__main__":
    main(verbose='-v' in sys.argv[1:])
