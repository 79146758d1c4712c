"""world_graph package."""

from .config import SimulationConfig, load_config
from .graph import GraphEdge, GraphNode, build_graph
from .query import EdgePath, LayoutView, node_radius
from .records import Category, TaggedRecord, has_enough_worlds, load_records
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from .simulation import ForceSimulation, Phase

__all__ = [
    "Category",
    "TaggedRecord",
    "load_records",
    "has_enough_worlds",
    "SimulationConfig",
    "load_config",
    "GraphNode",
    "GraphEdge",
    "build_graph",
    "ForceSimulation",
    "Phase",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "LayoutView",
    "EdgePath",
    "node_radius",
]
__version__ = "0.1.0"
