from __future__ import annotations

import hashlib
import logging
import math
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from .config import SimulationConfig
from .graph import GraphEdge, GraphNode, build_graph
from .records import TaggedRecord
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    STOPPED = "stopped"
    SETTLE = "settle"
    IDLE = "idle"


def _coincident_direction(a: str, b: str) -> Tuple[float, float]:
    """Unit vector for separating two nodes sitting on the same point.

    Derived from the node ids so repeated runs push the same way.
    """

    digest = hashlib.md5(f"{a}\x00{b}".encode("utf-8")).hexdigest()
    angle = int(digest[:8], 16) / 0xFFFFFFFF * 2 * math.pi
    return math.cos(angle), math.sin(angle)


class ForceSimulation:
    """Damped force-directed layout for a world graph.

    Repulsion between every pair, springs along edges and a weak pull to the
    canvas centre, integrated with explicit Euler plus friction. ``start``
    drives ``step`` from the owned scheduler: a fast settle burst followed
    by a slow idle cadence that runs until ``stop``.
    """

    def __init__(
        self,
        nodes: Iterable[GraphNode],
        edges: Iterable[GraphEdge],
        config: SimulationConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.scheduler: Scheduler = scheduler or AsyncioScheduler()
        self.nodes: List[GraphNode] = []
        self.edges: List[GraphEdge] = []
        self._index: Dict[str, int] = {}
        self._edge_indices: List[Tuple[int, int, GraphEdge]] = []
        self._handle: TimerHandle | None = None
        self._phase = Phase.STOPPED
        self.tick_count = 0
        self._load(nodes, edges)

    @classmethod
    def from_records(
        cls,
        records: Iterable[TaggedRecord],
        config: SimulationConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
        seed: int | None = None,
    ) -> "ForceSimulation":
        config = config or SimulationConfig()
        nodes, edges = build_graph(records, config, seed=seed)
        return cls(nodes, edges, config, scheduler=scheduler)

    def _load(self, nodes: Iterable[GraphNode], edges: Iterable[GraphEdge]) -> None:
        self.nodes = list(nodes)
        self.edges = list(edges)
        self._index = {node.id: i for i, node in enumerate(self.nodes)}
        self._edge_indices = []
        for edge in self.edges:
            i = self._index.get(edge.source)
            j = self._index.get(edge.target)
            if i is None or j is None or i == j:
                logger.debug("ignoring edge %s with unknown or identical endpoints", edge.id)
                continue
            self._edge_indices.append((i, j, edge))

    def rebuild(self, records: Iterable[TaggedRecord], *, seed: int | None = None) -> None:
        """Discard the current graph and build a fresh one from ``records``."""

        self.stop()
        nodes, edges = build_graph(records, self.config, seed=seed)
        self._load(nodes, edges)

    def node_index(self, node_id: str) -> int | None:
        return self._index.get(node_id)

    # ------------------------------------------------------------------
    # Physics

    def step(self, dt: float = 1.0) -> None:
        """Advance one simulation tick."""

        n = len(self.nodes)
        if n < 2:
            return

        cfg = self.config
        forces = [(0.0, 0.0) for _ in self.nodes]

        # 1) Pairwise repulsion
        for i in range(n):
            for j in range(i + 1, n):
                fx, fy = self._repel_force(self.nodes[i], self.nodes[j])
                forces[i] = (forces[i][0] + fx, forces[i][1] + fy)
                forces[j] = (forces[j][0] - fx, forces[j][1] - fy)

        # 2) Springs along shared-tag edges
        for i, j, edge in self._edge_indices:
            fx, fy = self._spring_force(self.nodes[i], self.nodes[j], edge.weight)
            forces[i] = (forces[i][0] + fx, forces[i][1] + fy)
            forces[j] = (forces[j][0] - fx, forces[j][1] - fy)

        # 3) Centering
        cx, cy = cfg.center
        for i, node in enumerate(self.nodes):
            forces[i] = (
                forces[i][0] + (cx - node.x) * cfg.centering_constant,
                forces[i][1] + (cy - node.y) * cfg.centering_constant,
            )

        # 4) Integrate
        for (fx, fy), node in zip(forces, self.nodes):
            node.vx = (node.vx + fx * dt) * cfg.friction
            node.vy = (node.vy + fy * dt) * cfg.friction
            node.x += node.vx * dt
            node.y += node.vy * dt

    def _repel_force(self, a: GraphNode, b: GraphNode) -> Tuple[float, float]:
        """Force on ``a`` from ``b``; ``b`` receives the negation."""

        dx = a.x - b.x
        dy = a.y - b.y
        raw = math.hypot(dx, dy)
        if raw == 0.0:
            ux, uy = _coincident_direction(a.id, b.id)
        else:
            ux, uy = dx / raw, dy / raw
        dist = max(raw, self.config.min_distance)
        f_mag = self.config.repulsion_constant / (dist * dist)
        return f_mag * ux, f_mag * uy

    def _spring_force(self, a: GraphNode, b: GraphNode, weight: float) -> Tuple[float, float]:
        """Hookean pull on ``a`` toward ``b`` (a push when compressed)."""

        dx = b.x - a.x
        dy = b.y - a.y
        raw = math.hypot(dx, dy)
        dist = max(raw, self.config.min_distance)
        displacement = raw - self.config.rest_length
        k = self.config.spring_constant * weight
        return dx / dist * displacement * k, dy / dist * displacement * k

    def probe_force(self, x: float, y: float) -> Tuple[float, float]:
        """Repulsion plus centering felt by an unconnected probe at ``(x, y)``."""

        cfg = self.config
        fx = (cfg.center[0] - x) * cfg.centering_constant
        fy = (cfg.center[1] - y) * cfg.centering_constant
        for node in self.nodes:
            dx = x - node.x
            dy = y - node.y
            raw = math.hypot(dx, dy)
            if raw == 0.0:
                continue
            dist = max(raw, cfg.min_distance)
            f_mag = cfg.repulsion_constant / (dist * dist)
            fx += f_mag * dx / raw
            fy += f_mag * dy / raw
        return fx, fy

    # ------------------------------------------------------------------
    # Scheduling

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is not Phase.STOPPED

    @property
    def current_interval(self) -> float | None:
        if self._phase is Phase.SETTLE:
            return self.config.settle_interval
        if self._phase is Phase.IDLE:
            return self.config.idle_interval
        return None

    def start(self) -> None:
        """Begin (or restart) the settle burst followed by the idle loop."""

        self._cancel_pending()
        self._phase = Phase.STOPPED
        if self.config.settle_tick_count > 0:
            phase, interval = Phase.SETTLE, self.config.settle_interval
        else:
            phase, interval = Phase.IDLE, self.config.idle_interval
        # The phase stays STOPPED unless a timer was actually scheduled.
        self._handle = self.scheduler.call_later(interval, self._tick)
        self.tick_count = 0
        self._phase = phase
        logger.debug("starting simulation of %d nodes in %s phase", len(self.nodes), phase.value)

    def stop(self) -> None:
        """Cancel the pending tick; positions stay where the last tick left them."""

        if self._phase is Phase.STOPPED and self._handle is None:
            return
        self._cancel_pending()
        self._phase = Phase.STOPPED
        logger.debug("stopped simulation after %d ticks", self.tick_count)

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule_next(self) -> None:
        interval = self.current_interval
        if interval is None:
            return
        self._handle = self.scheduler.call_later(interval, self._tick)

    def _tick(self) -> None:
        self._handle = None
        if self._phase is Phase.STOPPED:
            return
        self.step()
        self.tick_count += 1
        if self._phase is Phase.SETTLE and self.tick_count >= self.config.settle_tick_count:
            self._phase = Phase.IDLE
            logger.debug(
                "settle phase finished after %d ticks; idling every %.3fs",
                self.tick_count,
                self.config.idle_interval,
            )
        self._schedule_next()

    def positions(self) -> List[Tuple[float, float]]:
        return [(node.x, node.y) for node in self.nodes]
