"""numpy views over simulation state for tuning and plotting."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from .graph import GraphNode
from .simulation import ForceSimulation


def positions_array(nodes: Sequence[GraphNode]) -> np.ndarray:
    if not nodes:
        return np.zeros((0, 2), dtype=float)
    return np.array([(node.x, node.y) for node in nodes], dtype=float)


def velocities_array(nodes: Sequence[GraphNode]) -> np.ndarray:
    if not nodes:
        return np.zeros((0, 2), dtype=float)
    return np.array([(node.vx, node.vy) for node in nodes], dtype=float)


def kinetic_energy(nodes: Sequence[GraphNode]) -> float:
    """Total ``0.5 * |v|^2`` with unit mass; drops toward zero as the layout settles."""

    velocities = velocities_array(nodes)
    return float(0.5 * np.sum(velocities * velocities))


def layout_bounds(nodes: Sequence[GraphNode]) -> Tuple[float, float, float, float]:
    positions = positions_array(nodes)
    if positions.size == 0:
        return (0.0, 0.0, 0.0, 0.0)
    mins = positions.min(axis=0)
    maxs = positions.max(axis=0)
    return (float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))


def sample_force_field(
    simulation: ForceSimulation,
    grid_dims: Tuple[int, int],
    canvas_size: Tuple[float, float] | None = None,
) -> np.ndarray:
    """Sample :meth:`ForceSimulation.probe_force` on a ``(cols, rows)`` grid.

    Returns an array of shape ``(rows, cols, 2)`` holding ``(fx, fy)`` at
    evenly spaced points spanning the canvas edges.
    """

    cols, rows = grid_dims
    if cols <= 0 or rows <= 0:
        raise ValueError("grid_dims must be positive")
    width, height = canvas_size or simulation.config.canvas_size
    xs = np.linspace(0.0, float(width), cols)
    ys = np.linspace(0.0, float(height), rows)
    field = np.zeros((rows, cols, 2), dtype=float)
    for r, y in enumerate(ys):
        for c, x in enumerate(xs):
            field[r, c] = simulation.probe_force(float(x), float(y))
    return field
