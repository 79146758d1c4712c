from __future__ import annotations

import json
import math
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
for candidate in (SRC_ROOT, PROJECT_ROOT):
    if str(candidate) not in sys.path:
        sys.path.insert(0, str(candidate))

from world_graph import Category, ForceSimulation, ManualScheduler, SimulationConfig, TaggedRecord
from world_graph.diagnostics import (
    kinetic_energy,
    layout_bounds,
    positions_array,
    sample_force_field,
)
from world_graph.graph import GraphNode
from examples.run_world_map import run_world_map


def _records() -> list[TaggedRecord]:
    return [
        TaggedRecord(theme="A", tags=frozenset({"x", "y"})),
        TaggedRecord(theme="B", tags=frozenset({"y", "z"})),
        TaggedRecord(theme="C", tags=frozenset({"z"})),
        TaggedRecord(theme="D", tags=frozenset({"q"})),
    ]


def test_arrays_and_bounds() -> None:
    nodes = [
        GraphNode(id="a", x=1.0, y=5.0, record_count=1, dominant_category=Category.HOPE, tags=frozenset(), vx=3.0, vy=4.0),
        GraphNode(id="b", x=-2.0, y=7.0, record_count=1, dominant_category=Category.HOPE, tags=frozenset()),
    ]
    positions = positions_array(nodes)
    assert positions.shape == (2, 2)
    assert np.allclose(positions[1], (-2.0, 7.0))
    assert math.isclose(kinetic_energy(nodes), 12.5)
    assert layout_bounds(nodes) == (-2.0, 5.0, 1.0, 7.0)

    assert positions_array([]).shape == (0, 2)
    assert kinetic_energy([]) == 0.0
    assert layout_bounds([]) == (0.0, 0.0, 0.0, 0.0)


def test_settling_reduces_kinetic_energy() -> None:
    scheduler = ManualScheduler()
    simulation = ForceSimulation.from_records(_records(), scheduler=scheduler, seed=21)
    simulation.start()
    scheduler.advance(0.1)
    early = kinetic_energy(simulation.nodes)
    scheduler.advance(10.0)
    late = kinetic_energy(simulation.nodes)
    simulation.stop()
    assert late < early


def test_force_field_points_back_to_center_far_from_nodes() -> None:
    config = SimulationConfig(repulsion_constant=0.0)
    simulation = ForceSimulation.from_records(_records(), config, scheduler=ManualScheduler(), seed=2)
    field = sample_force_field(simulation, (5, 3))
    assert field.shape == (3, 5, 2)
    # Top-left corner sits up and left of the center, so the pull is down and right.
    assert field[0, 0, 0] > 0.0 and field[0, 0, 1] > 0.0
    assert np.allclose(field[1, 2], (0.0, 0.0))

    with pytest.raises(ValueError):
        sample_force_field(simulation, (0, 3))


def test_run_world_map_writes_timeline(tmp_path: Path) -> None:
    input_path = tmp_path / "records.json"
    input_path.write_text(
        json.dumps({"records": [{"theme": r.theme, "tags": sorted(r.tags)} for r in _records()]}),
        encoding="utf-8",
    )
    output_path = tmp_path / "layout.json"

    result = run_world_map(input_path, output_path=output_path, seconds=3.0, frame_interval=0.5, seed=4)

    saved = json.loads(output_path.read_text(encoding="utf-8"))
    assert saved["status"] == "ok"
    assert len(saved["timeline"]) == 7
    assert saved["timeline"][-1]["phase"] == "idle"
    assert [n["id"] for n in saved["layout"]["nodes"]] == ["A", "B", "C", "D"]
    assert result["output"] == str(output_path)


def test_run_world_map_reports_insufficient_worlds(tmp_path: Path) -> None:
    input_path = tmp_path / "records.json"
    input_path.write_text(json.dumps([{"theme": "Only", "tags": ["x"]}]), encoding="utf-8")
    result = run_world_map(input_path)
    assert result["status"] == "insufficient_worlds"
