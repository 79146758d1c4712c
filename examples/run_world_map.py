"""Build a world map from a records JSON and simulate it in virtual time.

Writes the final layout plus a timeline of sampled frames, mirroring what a
rendering layer would poll while the map is open.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

# Allow running the script from the repo without installing the package first.
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from world_graph import (  # noqa: E402
    ForceSimulation,
    LayoutView,
    ManualScheduler,
    SimulationConfig,
    has_enough_worlds,
    load_config,
    load_records,
)
from world_graph.diagnostics import kinetic_energy, layout_bounds  # noqa: E402

DEFAULT_INPUT = Path(__file__).with_name("input").joinpath("records.json")
DEFAULT_OUTPUT = Path(__file__).with_name("world_map_layout.json")


def run_world_map(
    input_path: Path,
    *,
    output_path: Path | None = None,
    config: SimulationConfig | None = None,
    seconds: float = 5.0,
    frame_interval: float = 0.25,
    seed: int | None = 1337,
) -> dict[str, Any]:
    records = load_records(input_path)
    if not has_enough_worlds(records):
        return {"input": str(input_path), "status": "insufficient_worlds", "timeline": []}

    scheduler = ManualScheduler()
    simulation = ForceSimulation.from_records(records, config, scheduler=scheduler, seed=seed)
    view = LayoutView(simulation)

    timeline = [{"t": 0.0, "phase": simulation.phase.value, "positions": simulation.positions()}]
    simulation.start()
    elapsed = 0.0
    while elapsed < seconds:
        scheduler.advance(frame_interval)
        elapsed += frame_interval
        timeline.append(
            {
                "t": round(elapsed, 6),
                "phase": simulation.phase.value,
                "ticks": simulation.tick_count,
                "energy": kinetic_energy(simulation.nodes),
                "positions": simulation.positions(),
            }
        )
    simulation.stop()

    result = {
        "input": str(input_path),
        "status": "ok",
        "config": simulation.config.to_dict(),
        "bounds": list(layout_bounds(simulation.nodes)),
        "layout": view.snapshot(),
        "timeline": timeline,
    }
    if output_path is not None:
        output_path.write_text(json.dumps(result, ensure_ascii=False, indent=2), encoding="utf-8")
        result["output"] = str(output_path)
    return result


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate the dream world map for a records JSON")
    parser.add_argument("--input", type=Path, default=DEFAULT_INPUT, help="Path to the records JSON")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Where to write the layout JSON")
    parser.add_argument("--config", type=Path, default=None, help="Optional JSON file of SimulationConfig overrides")
    parser.add_argument("--seconds", type=float, default=5.0, help="Virtual seconds to simulate")
    parser.add_argument("--frame-interval", type=float, default=0.25, help="Seconds between recorded frames")
    parser.add_argument("--seed", type=int, default=1337, help="Seed for initial node placement")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    config = load_config(args.config) if args.config else None
    result = run_world_map(
        args.input,
        output_path=args.output,
        config=config,
        seconds=args.seconds,
        frame_interval=args.frame_interval,
        seed=args.seed,
    )
    if result["status"] != "ok":
        print("Not enough distinct worlds to draw a map.")
        return
    print(f"Saved {len(result['timeline'])} frames to {args.output}")
    for node in result["layout"]["nodes"]:
        print(f"  {node['id']}: ({node['x']:.2f}, {node['y']:.2f})")


if __name__ == "__main__":
    main()
