"""Render a heatmap of the world-map force field after the settle phase."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from world_graph import ForceSimulation, LayoutView, ManualScheduler, load_records, node_radius  # noqa: E402
from world_graph.diagnostics import positions_array, sample_force_field  # noqa: E402

DEFAULT_INPUT = Path(__file__).with_name("input").joinpath("records.json")


def _render_heatmap(
    simulation: ForceSimulation,
    *,
    grid_cols: int,
    grid_rows: int,
    cmap: str,
    output_path: Path,
    quiver_stride: int,
) -> None:
    width, height = simulation.config.canvas_size
    field = sample_force_field(simulation, (grid_cols, grid_rows))
    magnitude = np.hypot(field[:, :, 0], field[:, :, 1])
    # Log scale so the near-node spikes do not wash out the rest of the canvas.
    shaded = np.log1p(magnitude)

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.imshow(shaded, extent=(0, width, height, 0), cmap=cmap, origin="upper")

    if quiver_stride > 0:
        xs = np.linspace(0.0, width, grid_cols)
        ys = np.linspace(0.0, height, grid_rows)
        Qx, Qy = np.meshgrid(xs[::quiver_stride], ys[::quiver_stride])
        sampled = field[::quiver_stride, ::quiver_stride]
        ax.quiver(Qx, Qy, sampled[:, :, 0], -sampled[:, :, 1], color="white", alpha=0.4)

    view = LayoutView(simulation)
    for path in view.edge_paths():
        curve = np.array([path.point_at(t) for t in np.linspace(0.0, 1.0, 24)])
        ax.plot(curve[:, 0], curve[:, 1], color="#c8b6ff", alpha=0.6, linewidth=path.width)

    positions = positions_array(simulation.nodes)
    if positions.size:
        sizes = [node_radius(node) ** 2 for node in simulation.nodes]
        ax.scatter(positions[:, 0], positions[:, 1], s=sizes, c="#ffd6a5", edgecolors="black", alpha=0.8)
        for node in simulation.nodes:
            ax.annotate(node.id, (node.x, node.y), color="white", fontsize=7, ha="center")

    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_title("World map force field")
    fig.tight_layout()
    fig.savefig(output_path, dpi=200)
    plt.close(fig)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Visualize the world-map force field as a heatmap")
    parser.add_argument("--input", type=Path, default=DEFAULT_INPUT, help="Path to the records JSON")
    parser.add_argument("--seconds", type=float, default=3.0, help="Virtual seconds to simulate first")
    parser.add_argument("--seed", type=int, default=1337, help="Seed for initial node placement")
    parser.add_argument("--grid-cols", type=int, default=120, help="Samples across the canvas width")
    parser.add_argument("--grid-rows", type=int, default=0, help="Samples across the canvas height (0 = match cols)")
    parser.add_argument("--cmap", type=str, default="magma", help="Matplotlib colormap name to use")
    parser.add_argument("--quiver-stride", type=int, default=12, help="Stride for vector arrows (0 disables quiver)")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(__file__).with_name("force_field_heatmap.png"),
        help="Where to save the rendered heatmap",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    scheduler = ManualScheduler()
    simulation = ForceSimulation.from_records(load_records(args.input), scheduler=scheduler, seed=args.seed)
    simulation.start()
    scheduler.advance(args.seconds)
    simulation.stop()

    grid_rows = args.grid_rows if args.grid_rows > 0 else args.grid_cols
    _render_heatmap(
        simulation,
        grid_cols=args.grid_cols,
        grid_rows=grid_rows,
        cmap=args.cmap,
        output_path=args.output,
        quiver_stride=max(args.quiver_stride, 0),
    )
    print(f"Force field heatmap saved to {args.output}")


if __name__ == "__main__":
    main()
