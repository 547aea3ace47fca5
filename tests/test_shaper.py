import json

import pytest

from conscript.shaper import RECOGNIZED_FIELDS, parse_field_selection, render_view, shape_container

from fakes import make_details

DEFAULT_KEYS = {"ID", "Name", "Image", "Status", "State"}


def test_parse_field_selection_ignores_unknown_keys():
    selection = parse_field_selection(["running", "pretty", "dead", "Status"])
    assert selection == frozenset({"running", "dead"})


def test_parse_field_selection_empty():
    assert parse_field_selection([]) == frozenset()


def test_empty_selection_returns_default_projection():
    details = make_details("abc123", "running")
    wire = shape_container(details, frozenset()).to_wire()
    assert set(wire) == DEFAULT_KEYS
    assert wire["ID"] == details.id
    assert wire["Name"] == "/abc123-name"
    assert wire["Status"] == "running"
    assert wire["State"]["Pid"] == 4242


def test_default_projection_for_exited_container_keeps_five_keys():
    details = make_details("abc123", "exited", ExitCode=137, Error="")
    assert set(shape_container(details, frozenset()).to_wire()) == DEFAULT_KEYS


@pytest.mark.parametrize("selection, expected", [
    ({"status"}, {"Status"}),
    ({"status", "running"}, {"Status", "Running"}),
    ({"running", "dead"}, {"Running", "Dead"}),
    ({"error", "exitcode"}, {"Error", "ExitCode"}),
    ({"state"}, {"State"}),
    (set(RECOGNIZED_FIELDS), {"Status", "Running", "Paused", "Restarting", "Dead", "Error", "ExitCode", "State"}),
])
def test_selection_yields_exactly_the_selected_keys(selection, expected):
    details = make_details("abc123", "running")
    wire = shape_container(details, frozenset(selection)).to_wire()
    assert set(wire) == expected


def test_selected_values_come_from_state():
    details = make_details("abc123", "exited", ExitCode=2, Error="oom", Dead=False)
    wire = shape_container(details, frozenset({"exitcode", "error", "running", "dead", "paused"})).to_wire()
    assert wire == {"ExitCode": 2, "Error": "oom", "Running": False, "Dead": False, "Paused": False}


def test_false_and_zero_values_are_not_dropped():
    details = make_details("abc123", "created")
    wire = shape_container(details, frozenset({"running", "exitcode", "error"})).to_wire()
    assert wire == {"Running": False, "ExitCode": 0, "Error": ""}


def test_render_is_indented_and_stable():
    details = make_details("abc123", "paused")
    first = render_view(shape_container(details, frozenset()))
    second = render_view(shape_container(make_details("abc123", "paused"), frozenset()))
    assert first == second
    assert first.startswith('{\n  "ID": ')
    assert json.loads(first)["Status"] == "paused"
