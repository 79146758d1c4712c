import math
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from world_graph import (
    Category,
    ForceSimulation,
    LayoutView,
    ManualScheduler,
    TaggedRecord,
    node_radius,
)
from world_graph.graph import GraphEdge, GraphNode


def _node(node_id: str, x: float, y: float, record_count: int = 1) -> GraphNode:
    return GraphNode(
        id=node_id,
        x=x,
        y=y,
        record_count=record_count,
        dominant_category=Category.HOPE,
        tags=frozenset({"moon"}),
    )


def _view(nodes: list[GraphNode], edges: list[GraphEdge] | None = None) -> LayoutView:
    return LayoutView(ForceSimulation(nodes, edges or [], scheduler=ManualScheduler()))


def test_hit_test_scenario() -> None:
    first = _node("first", 100.0, 100.0)
    second = _node("second", 300.0, 300.0)
    view = _view([first, second])
    radii = {"first": 20.0, "second": 30.0}

    def radius_fn(node: GraphNode) -> float:
        return radii[node.id]

    assert view.hit_test((105.0, 105.0), radius_fn) is first
    assert view.hit_test((305.0, 305.0), radius_fn) is second
    assert view.hit_test((200.0, 200.0), radius_fn) is None


def test_hit_test_boundary_is_exclusive_and_overlap_prefers_build_order() -> None:
    first = _node("first", 0.0, 0.0)
    second = _node("second", 10.0, 0.0)
    view = _view([first, second])

    assert view.hit_test((20.0, 0.0), lambda node: 10.0) is None
    assert view.hit_test((5.0, 0.0), lambda node: 10.0) is first


def test_default_radius_grows_with_record_count() -> None:
    assert node_radius(_node("a", 0.0, 0.0, record_count=1)) == 24.0
    assert node_radius(_node("b", 0.0, 0.0, record_count=3)) == 40.0

    view = _view([_node("big", 50.0, 50.0, record_count=3)])
    assert view.hit_test((85.0, 50.0)) is not None
    assert view.hit_test((91.0, 50.0)) is None


def test_edge_path_bends_above_midpoint() -> None:
    a = _node("a", 100.0, 100.0)
    b = _node("b", 200.0, 140.0)
    edge = GraphEdge(source="a", target="b", shared_tags=frozenset({"moon", "water"}))
    view = _view([a, b], [edge])

    path = view.edge_path(edge)
    assert path is not None
    assert path.start == (100.0, 100.0)
    assert path.end == (200.0, 140.0)
    assert path.control == (150.0, 100.0)
    assert path.width == 3.0
    assert path.point_at(0.0) == path.start
    assert path.point_at(1.0) == path.end

    dangling = GraphEdge(source="a", target="missing", shared_tags=frozenset({"moon"}))
    assert view.edge_path(dangling) is None
    assert [p.edge_id for p in view.edge_paths()] == ["a-b"]


def test_canvas_transform_round_trips_tap_points() -> None:
    node = _node("a", 100.0, 100.0)
    view = _view([node])
    view_size = (400.0, 500.0)

    assert view.canvas_offset(view_size) == (40.0, 90.0)
    tap = view.to_view(node.position, view_size)
    assert tap == (140.0, 190.0)
    assert view.hit_test(view.to_canvas(tap, view_size)) is node


def test_queries_do_not_move_nodes() -> None:
    nodes = [_node("a", 10.0, 10.0), _node("b", 60.0, 60.0)]
    edge = GraphEdge(source="a", target="b", shared_tags=frozenset({"moon"}))
    view = _view(nodes, [edge])
    before = [(n.x, n.y, n.vx, n.vy) for n in nodes]

    view.current_nodes()
    view.current_edges()
    view.hit_test((10.0, 10.0))
    view.edge_paths()
    view.snapshot()
    view.to_canvas((0.0, 0.0), (320.0, 320.0))

    assert [(n.x, n.y, n.vx, n.vy) for n in nodes] == before
    assert view.current_nodes() is view.simulation.nodes


def test_snapshot_and_records_for_node() -> None:
    records = [
        TaggedRecord(theme="A", category=Category.HOPE, tags=frozenset({"y", "x"})),
        TaggedRecord(theme="B", tags=frozenset({"y"})),
        TaggedRecord(theme="A", category=Category.HOPE, tags=frozenset()),
    ]
    simulation = ForceSimulation.from_records(records, scheduler=ManualScheduler(), seed=1)
    view = LayoutView(simulation)

    snapshot = view.snapshot()
    assert [n["id"] for n in snapshot["nodes"]] == ["A", "B"]
    assert snapshot["nodes"][0]["tags"] == ["x", "y"]
    assert snapshot["nodes"][0]["dominant_category"] == "hope"
    assert snapshot["edges"] == [
        {"id": "A-B", "source": "A", "target": "B", "shared_tags": ["y"], "weight": 1}
    ]
    assert len(view.records_for("A", records)) == 2
    assert view.node("B") is simulation.nodes[1]
    assert view.node("nope") is None
    assert math.isfinite(snapshot["nodes"][1]["x"])
