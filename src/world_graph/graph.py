from __future__ import annotations

import logging
import math
import random
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from .config import SimulationConfig
from .records import Category, TaggedRecord

logger = logging.getLogger(__name__)


@dataclass
class GraphNode:
    """One world: every record sharing a theme label.

    ``x``/``y``/``vx``/``vy`` belong to the simulation once it is created;
    the remaining fields are fixed at build time.
    """

    id: str
    x: float
    y: float
    record_count: int
    dominant_category: Category
    tags: frozenset[str]
    vx: float = 0.0
    vy: float = 0.0

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def velocity(self) -> Tuple[float, float]:
        return (self.vx, self.vy)


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    shared_tags: frozenset[str]

    @property
    def pair(self) -> Tuple[str, str]:
        a, b = sorted((self.source, self.target))
        return (a, b)

    @property
    def id(self) -> str:
        return "-".join(self.pair)

    @property
    def weight(self) -> int:
        return len(self.shared_tags)


@dataclass
class _ThemeGroup:
    count: int
    categories: Counter
    tags: set


def dominant_category(counts: Counter) -> Category:
    """Mode of ``counts``; ties go to the category declared first."""

    best = Category.SERENITY
    best_count = 0
    for category in Category:
        if counts[category] > best_count:
            best = category
            best_count = counts[category]
    return best


def _group_by_theme(records: Iterable[TaggedRecord]) -> Dict[str, _ThemeGroup]:
    groups: Dict[str, _ThemeGroup] = {}
    for record in records:
        if not record.has_theme:
            continue
        group = groups.get(record.theme)
        if group is None:
            group = _ThemeGroup(count=0, categories=Counter(), tags=set())
            groups[record.theme] = group
        group.count += 1
        group.categories[record.category] += 1
        group.tags.update(record.tags)
    return groups


def _seed_position(config: SimulationConfig, rng: random.Random) -> Tuple[float, float]:
    angle = rng.uniform(0.0, 2 * math.pi)
    radius = rng.uniform(config.seed_radius_min, config.seed_radius_max)
    cx, cy = config.center
    return cx + math.cos(angle) * radius, cy + math.sin(angle) * radius


def build_edges(nodes: List[GraphNode]) -> List[GraphEdge]:
    edges: List[GraphEdge] = []
    n = len(nodes)
    for i in range(n):
        for j in range(i + 1, n):
            shared = nodes[i].tags & nodes[j].tags
            if shared:
                edges.append(GraphEdge(source=nodes[i].id, target=nodes[j].id, shared_tags=shared))
    return edges


def build_graph(
    records: Iterable[TaggedRecord],
    config: SimulationConfig | None = None,
    *,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """Turn a record collection into world nodes and shared-tag edges.

    Nodes come out in the order their theme is first seen. Records without
    a theme are skipped. Each node starts at a random point of the annulus
    ``[seed_radius_min, seed_radius_max]`` around ``config.center``; pass
    ``seed`` or ``rng`` for a reproducible layout.
    """

    config = config or SimulationConfig()
    rng = rng or random.Random(seed)

    nodes: List[GraphNode] = []
    for theme, group in _group_by_theme(records).items():
        x, y = _seed_position(config, rng)
        nodes.append(
            GraphNode(
                id=theme,
                x=x,
                y=y,
                record_count=group.count,
                dominant_category=dominant_category(group.categories),
                tags=frozenset(group.tags),
            )
        )

    edges = build_edges(nodes)
    logger.debug("built world graph with %d nodes and %d edges", len(nodes), len(edges))
    return nodes, edges
