import json
import random

import pytest

from elevation import ElevationService
from errors import InvalidInputError
from models import LoopConfig, PipelineConfig
from route_templates import TemplateLibrary
from routing import LocalApproximator, RouteSnapper
from session import RouteSession, load_gps_offsets, save_gps_offsets


class FakeSnapper:
    """Returns a fixed route; optionally runs a callback mid-request."""

    def __init__(self, result, during=None):
        self.result = result
        self.during = during
        self.calls = 0

    def snap_to_roads(self, coordinates, options=None):
        self.calls += 1
        if self.during:
            self.during()
        return list(self.result)


SNAPPED = [(37.0, -122.0), (37.001, -122.001), (37.002, -122.002)]


@pytest.fixture
def session():
    snapper = RouteSnapper([], LocalApproximator(random.Random(1)))
    return RouteSession(snapper, ElevationService(rng=random.Random(2)))


def draw(session, points):
    for lat, lon in points:
        session.add_point(lat, lon)


def test_add_undo_clear(session):
    session.add_point(59.3, 18.0)
    session.add_point(59.31, 18.01)
    assert session.current_route == [(59.3, 18.0), (59.31, 18.01)]

    session.undo_last_point()
    assert session.current_route == [(59.3, 18.0)]

    session.clear_route()
    assert session.current_route == []
    session.undo_last_point()
    assert session.current_route == []


def test_invalid_point_rejected(session):
    with pytest.raises(InvalidInputError):
        session.add_point(91.0, 0.0)
    assert session.current_route == []


def test_gps_offset_only_applies_to_gps_points(session):
    session.set_gps_offsets(0.001, -0.002)
    session.add_point(59.3, 18.0, from_gps=True)
    session.add_point(59.3, 18.0)
    lat, lon = session.current_route[0]
    assert lat == pytest.approx(59.301)
    assert lon == pytest.approx(17.998)
    assert session.current_route[1] == (59.3, 18.0)


def test_snap_stores_result_and_active_route_prefers_it(square_route):
    session = RouteSession(FakeSnapper(SNAPPED), ElevationService())
    draw(session, square_route)
    assert session.active_route == square_route

    assert session.snap_route(PipelineConfig()) == SNAPPED
    assert session.active_route == SNAPPED


def test_edit_clears_snapped_route(square_route):
    session = RouteSession(FakeSnapper(SNAPPED), ElevationService())
    draw(session, square_route)
    session.snap_route(PipelineConfig())

    session.add_point(37.78, -122.48)
    assert session.snapped_route is None
    assert session.active_route[-1] == (37.78, -122.48)


def test_stale_snap_result_is_discarded(square_route):
    session = RouteSession(None, ElevationService())
    session.snapper = FakeSnapper(SNAPPED, during=lambda: session.add_point(37.78, -122.48))
    draw(session, square_route)

    assert session.snap_route(PipelineConfig()) is None
    assert session.snapped_route is None
    assert len(session.current_route) == len(square_route) + 1


def test_snap_requires_two_points(session):
    session.add_point(59.3, 18.0)
    with pytest.raises(InvalidInputError):
        session.snap_route(PipelineConfig())


def test_build_route_has_parallel_lists(session, square_route):
    draw(session, square_route)
    route = session.build_route(PipelineConfig(start_time="2024-05-01T07:00:00Z"))

    assert len(route) == len(square_route)
    assert len(route.elevations) == len(square_route)
    assert len(route.timestamps) == len(square_route)
    assert route.timestamps[0].startswith("2024-05-01T07:00:00")
    assert route.snapped is False


def test_build_route_without_elevation(session, square_route):
    draw(session, square_route)
    route = session.build_route(PipelineConfig(), with_elevation=False)
    assert route.elevations is None
    assert len(route.timestamps) == 4


def test_export_uses_config_name(session, square_route):
    draw(session, square_route)
    content, filename, mime = session.export("json", PipelineConfig(route_name="Evening Loop"))
    assert filename == "Evening_Loop.json"
    assert json.loads(content)["metadata"]["name"] == "Evening Loop"


def test_export_requires_route(session):
    with pytest.raises(InvalidInputError):
        session.export("gpx", PipelineConfig())


def test_create_loop_out_and_back_doubles_back(session):
    draw(session, [(59.30, 18.00), (59.31, 18.00)])
    config = PipelineConfig(loop=LoopConfig(lap_count=2), loop_type="out-and-back")
    route = session.create_loop(config)
    assert route[0] == (59.30, 18.00)
    assert route[-1] == (59.30, 18.00)
    assert len(route) > 4


def test_apply_template_and_shape(session):
    name = session.apply_template("golden-gate-park")
    assert name
    assert len(session.current_route) >= 2

    session.apply_shape("square", (59.3, 18.0), 200)
    assert len(session.current_route) == 5
    assert session.current_route[0] == session.current_route[-1]

    with pytest.raises(InvalidInputError):
        session.apply_template("nowhere")


def test_statistics(session, square_route):
    draw(session, square_route)
    stats = session.statistics(PipelineConfig(pace_min_per_km=5.0))
    assert stats["num_points"] == 4
    assert stats["distance_km"] > 0
    assert stats["duration_minutes"] == pytest.approx(stats["distance_km"] * 5.0)


def test_gps_offsets_persist(tmp_path):
    path = tmp_path / "settings" / "settings.json"
    assert load_gps_offsets(path) == (0.0, 0.0)

    save_gps_offsets(0.0005, -0.0003, path)
    assert load_gps_offsets(path) == (0.0005, -0.0003)
    data = json.loads(path.read_text())
    assert set(data) == {"gpsLatOffset", "gpsLngOffset"}


def test_corrupt_settings_fall_back_to_zero(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_gps_offsets(path) == (0.0, 0.0)


def test_save_as_template_persists(tmp_path, square_route):
    path = tmp_path / "templates.json"
    session = RouteSession(FakeSnapper(SNAPPED), ElevationService(), templates=TemplateLibrary(path))
    draw(session, square_route)

    assert session.save_as_template("Park Loop") == "Park Loop"
    reloaded = TemplateLibrary(path).get_template("park-loop")
    assert reloaded.coordinates == square_route
    assert reloaded.distance > 0

    with pytest.raises(InvalidInputError):
        session.save_as_template("   ")


def test_optimize_replaces_route_and_drops_snap(square_route):
    session = RouteSession(FakeSnapper(SNAPPED), ElevationService())
    draw(session, square_route)
    session.snap_route(PipelineConfig())

    result = session.optimize("smoothing")
    assert session.snapped_route is None
    assert len(result) == len(SNAPPED)
    assert result[0] == SNAPPED[0]

    with pytest.raises(InvalidInputError):
        session.optimize("teleport")
