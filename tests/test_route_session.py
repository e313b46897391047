import pytest

from workforce_routes.errors import PreconditionFailure, RecordNotFound, ResolutionFailure, RoutingFailure
from workforce_routes.models.domain import RouteStats, WaypointKind
from workforce_routes.services.routing.stats import compute_stats


def test_single_waypoint_cannot_generate_a_route(session, directions):
    session.add_waypoint("lodging", 7)

    assert [waypoint.key for waypoint in session.waypoints] == [("7", WaypointKind.LODGING)]
    with pytest.raises(PreconditionFailure):
        session.generate_route()

    assert directions.calls == []
    assert session.notices[-1].action == "generate route"
    assert session.stats().route_count == 0


def test_lodging_to_worksite_route_updates_stats(session):
    session.add_waypoint(WaypointKind.LODGING, 7)
    session.add_waypoint(WaypointKind.WORKSITE, 3)

    route = session.generate_route()

    stats = session.stats()
    assert route.distance_km > 0
    assert stats.waypoint_count == 2
    assert stats.route_count == 1
    assert stats.planned == 1
    assert stats.total_distance_km == pytest.approx(12.5)
    assert stats.total_duration_min == pytest.approx(18.0)


def test_removing_down_to_one_waypoint_invalidates_route(session, map_adapter):
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)
    session.generate_route()

    session.remove_waypoint(7, "lodging")

    stats = session.stats()
    assert session.route is None
    assert stats.route_count == 0
    assert stats.total_distance_km == 0
    assert stats.total_duration_min == 0
    assert stats.waypoint_count == 1
    assert "main-route" not in map_adapter.paths


def test_route_finishing_after_removal_is_discarded(session, directions, map_adapter):
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)

    # The operator removes lodging 7 while the directions request is in flight.
    directions.before_answer = lambda: session.remove_waypoint(7, WaypointKind.LODGING)

    with pytest.raises(RoutingFailure) as excinfo:
        session.generate_route()

    assert "superseded" in excinfo.value.message
    assert session.route is None
    assert session.stats() == RouteStats(waypoint_count=1)
    assert "main-route" not in map_adapter.paths
    assert session.notices[-1].action == "generate route"


def test_route_finishing_after_reset_is_discarded(session, directions, map_adapter):
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)
    directions.before_answer = session.reset

    with pytest.raises(RoutingFailure):
        session.generate_route()

    assert session.route is None
    assert map_adapter.paths == {}
    assert map_adapter.markers == {}


def test_removing_with_two_left_keeps_route(session):
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)
    session.add_waypoint("worksite", 9)
    session.generate_route()

    session.remove_waypoint(9, "worksite")

    assert session.route is not None
    assert session.stats().waypoint_count == 2


def test_geocoding_failure_produces_notice_and_no_marker(session, map_adapter):
    session.add_waypoint("lodging", 7)

    with pytest.raises(ResolutionFailure):
        session.add_waypoint("worksite", 5)

    assert len(session.waypoints) == 1
    assert "worksite:5" not in map_adapter.markers
    notice = session.notices[-1]
    assert notice.action == "add waypoint"
    assert notice.level == "error"


def test_unknown_record_is_reported(session):
    with pytest.raises(RecordNotFound) as excinfo:
        session.add_waypoint("worksite", 404)

    assert excinfo.value.action == "add waypoint"
    assert session.notices[-1].message == "Work site 404 not found."


def test_work_order_waypoints_are_rejected(session, geocoder):
    with pytest.raises(PreconditionFailure):
        session.add_waypoint("work-order", 11)

    assert geocoder.queries == []
    assert session.notices[-1].action == "add waypoint"


def test_routing_failure_zeroes_stats_and_notifies(session, directions):
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)
    session.generate_route()
    directions.no_route = True

    with pytest.raises(RoutingFailure):
        session.generate_route()

    assert session.stats() == RouteStats(waypoint_count=2)
    assert session.notices[-1].action == "generate route"


def test_assigned_work_order_is_marked_after_generation(session, map_adapter):
    session.set_work_order(11)
    session.set_vehicle(2)
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)

    route = session.generate_route()

    assert "work-order:11" in map_adapter.markers
    # The auxiliary marker never changes the computed route.
    assert [waypoint.key for waypoint in route.waypoints] == [
        ("7", WaypointKind.LODGING),
        ("3", WaypointKind.WORKSITE),
    ]
    assert session.assignment.vehicle.plate == "ABC1D23"


def test_unresolvable_work_order_site_is_a_warning_only(session, map_adapter):
    session.set_work_order(12)  # its work site does not geocode
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)

    session.generate_route()

    assert session.route is not None
    assert not any(marker_id.startswith("work-order") for marker_id in map_adapter.markers)
    assert session.notices[-1].level == "warning"
    assert session.notices[-1].action == "mark work order"


def test_unassigned_work_order_marker_is_gone_after_regeneration(session, map_adapter):
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)
    session.set_work_order(11)
    session.generate_route()
    assert "work-order:11" in map_adapter.markers

    session.set_work_order(None)
    session.generate_route()

    assert sorted(map_adapter.markers) == ["lodging:7", "worksite:3"]


def test_regeneration_drops_marker_of_previous_work_order_when_new_one_fails(session, map_adapter):
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)
    session.set_work_order(11)
    session.generate_route()

    session.set_work_order(12)  # its work site does not geocode
    session.generate_route()

    assert not any(marker_id.startswith("work-order") for marker_id in map_adapter.markers)
    assert session.notices[-1].level == "warning"


def test_unreachable_records_on_add_leave_a_notice(session, records, monkeypatch):
    def unreachable(record_id):
        raise ConnectionError("records API unavailable")

    monkeypatch.setattr(records, "get_lodging", unreachable)

    with pytest.raises(ConnectionError):
        session.add_waypoint("lodging", 7)

    assert session.waypoints == []
    assert session.notices[-1].action == "add waypoint"
    assert "records API unavailable" in session.notices[-1].message


def test_assignment_is_cleared_only_explicitly(session):
    session.set_work_order(11)
    session.set_vehicle(2)
    session.add_waypoint("lodging", 7)
    session.remove_waypoint(7, "lodging")

    assert session.assignment.work_order is not None
    session.set_work_order(None)
    assert session.assignment.work_order is None
    assert session.assignment.vehicle is not None


def test_unknown_vehicle_is_reported(session):
    with pytest.raises(RecordNotFound):
        session.set_vehicle(99)

    assert session.notices[-1].action == "assign vehicle"
    assert session.assignment.vehicle is None


def test_reset_clears_everything(session, map_adapter):
    session.set_work_order(11)
    session.add_waypoint("lodging", 7)
    session.add_waypoint("worksite", 3)
    session.generate_route()

    session.reset()

    assert session.waypoints == []
    assert session.route is None
    assert session.assignment.work_order is None
    assert session.notices == []
    assert map_adapter.to_feature_collection()["features"] == []


def test_compute_stats_without_route_only_counts_waypoints():
    assert compute_stats(None, 3) == RouteStats(waypoint_count=3)
