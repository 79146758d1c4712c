"""Read-only accessors a rendering layer polls every frame."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Tuple

from .graph import GraphEdge, GraphNode
from .records import TaggedRecord
from .simulation import ForceSimulation

Point = Tuple[float, float]
RadiusFn = Callable[[GraphNode], float]

BASE_NODE_RADIUS = 16.0
RADIUS_PER_RECORD = 8.0


def node_radius(node: GraphNode) -> float:
    """Rendered size of a world; grows with the number of records in it."""

    return BASE_NODE_RADIUS + RADIUS_PER_RECORD * node.record_count


@dataclass(frozen=True)
class EdgePath:
    """Quadratic curve from ``start`` to ``end`` bent through ``control``."""

    edge_id: str
    start: Point
    control: Point
    end: Point
    width: float

    def point_at(self, t: float) -> Point:
        t = min(max(t, 0.0), 1.0)
        u = 1.0 - t
        x = u * u * self.start[0] + 2 * u * t * self.control[0] + t * t * self.end[0]
        y = u * u * self.start[1] + 2 * u * t * self.control[1] + t * t * self.end[1]
        return x, y


class LayoutView:
    """Snapshot queries over a live :class:`ForceSimulation`.

    The view never writes positions back; any pan or offset the caller
    applies stays a rendering-time transform (see :meth:`to_canvas`).
    """

    def __init__(self, simulation: ForceSimulation) -> None:
        self.simulation = simulation

    def current_nodes(self) -> List[GraphNode]:
        return self.simulation.nodes

    def current_edges(self) -> List[GraphEdge]:
        return self.simulation.edges

    def node(self, node_id: str) -> GraphNode | None:
        index = self.simulation.node_index(node_id)
        if index is None:
            return None
        return self.simulation.nodes[index]

    def hit_test(self, point: Point, radius_fn: RadiusFn = node_radius) -> GraphNode | None:
        """Return the first node (in build order) whose radius covers ``point``."""

        px, py = point
        for node in self.simulation.nodes:
            if math.hypot(px - node.x, py - node.y) < radius_fn(node):
                return node
        return None

    def edge_path(self, edge: GraphEdge) -> EdgePath | None:
        source = self.node(edge.source)
        target = self.node(edge.target)
        if source is None or target is None:
            return None
        mid_x = (source.x + target.x) / 2.0
        mid_y = (source.y + target.y) / 2.0 - self.simulation.config.edge_lift
        return EdgePath(
            edge_id=edge.id,
            start=source.position,
            control=(mid_x, mid_y),
            end=target.position,
            width=1.0 + edge.weight,
        )

    def edge_paths(self) -> List[EdgePath]:
        paths = (self.edge_path(edge) for edge in self.simulation.edges)
        return [path for path in paths if path is not None]

    def canvas_offset(self, view_size: Point) -> Point:
        canvas_w, canvas_h = self.simulation.config.canvas_size
        return (view_size[0] - canvas_w) / 2.0, (view_size[1] - canvas_h) / 2.0

    def to_canvas(self, point: Point, view_size: Point) -> Point:
        off_x, off_y = self.canvas_offset(view_size)
        return point[0] - off_x, point[1] - off_y

    def to_view(self, point: Point, view_size: Point) -> Point:
        off_x, off_y = self.canvas_offset(view_size)
        return point[0] + off_x, point[1] + off_y

    def records_for(self, node_id: str, records: Iterable[TaggedRecord]) -> List[TaggedRecord]:
        return [record for record in records if record.theme == node_id]

    def snapshot(self) -> dict[str, Any]:
        return {
            "nodes": [
                {
                    "id": node.id,
                    "x": node.x,
                    "y": node.y,
                    "record_count": node.record_count,
                    "dominant_category": node.dominant_category.value,
                    "tags": sorted(node.tags),
                }
                for node in self.simulation.nodes
            ],
            "edges": [
                {
                    "id": edge.id,
                    "source": edge.source,
                    "target": edge.target,
                    "shared_tags": sorted(edge.shared_tags),
                    "weight": edge.weight,
                }
                for edge in self.simulation.edges
            ],
        }
