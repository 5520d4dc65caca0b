"""
Test mapsketch CLI
==================

Step registry, script replay and the command-line entry point.
"""

import json
from pathlib import Path

import pytest

from mapsketch_cli import (
    SessionReplayer,
    StepNotAvailableError,
    StepRegistry,
    load_yaml_config,
    parse_step,
)
from mapsketch_cli.cli import main
from mapsketch_draw import InvariantViolation, Mode

PARK_SCRIPT = Path(__file__).parent / "config" / "sessions" / "park.yaml"


def write_script(tmp_path, text):
    path = tmp_path / "session.yaml"
    path.write_text(text)
    return path


# ===== Registry =====

def test_registry_executes_with_and_without_data():
    calls = []
    registry = StepRegistry()
    registry.register('ping', lambda: calls.append('ping'), "No argument")
    registry.register('echo', calls.append, "One argument", takes_argument=True)

    registry.execute('ping')
    registry.execute('echo', 0)

    assert calls == ['ping', 0]
    assert registry.available_steps == {'ping', 'echo'}
    assert registry.get_help()['echo'] == "One argument"
    assert registry.count() == 2


def test_registry_rejects_unknown_and_duplicate_steps():
    registry = StepRegistry()
    registry.register('ping', lambda: None, "")

    with pytest.raises(StepNotAvailableError, match="ping"):
        registry.execute('pong')
    with pytest.raises(ValueError):
        registry.register('ping', lambda: None, "")


# ===== Replay =====

def test_parse_step():
    assert parse_step("finish") == ("finish", None)
    assert parse_step({"click": [1, 2]}) == ("click", [1, 2])
    with pytest.raises(ValueError):
        parse_step({"click": [1, 2], "move": [3, 4]})
    with pytest.raises(ValueError):
        parse_step(42)


def test_replay_park_script():
    replayer = SessionReplayer()
    result = replayer.run(load_yaml_config(PARK_SCRIPT)["steps"])

    assert result.committed_ids == [1, 2, 3]
    assert result.validation_errors == []
    kinds = [f["properties"]["kind"] for f in replayer.engine.get_committed_geometry()["features"]]
    assert kinds == ["polygon", "circle", "rectangle"]
    circle = replayer.engine.get_committed_geometry("circle")["features"][0]
    assert circle["properties"]["radius_m"] == 140


def test_replay_collects_validation_errors_and_finish():
    replayer = SessionReplayer()
    result = replayer.run([
        {"select": "polygon"},
        {"click": [0, 0]},
        {"dblclick": [0, 0]},
        {"click": [1, 0]},
        {"click": [1, 1]},
        "finish",
        {"remove": 1},
    ])

    assert len(result.validation_errors) == 1
    assert result.committed_ids == [1]
    assert result.steps_run == 7
    assert len(replayer.engine.collection) == 0
    assert replayer.engine.mode is Mode.IDLE


def test_replay_cancel_and_finish_with_nothing():
    replayer = SessionReplayer()
    with pytest.raises(InvariantViolation):
        replayer.run([{"select": "rectangle"}, {"click": [0, 0]}, "cancel", "finish"])


def test_replay_unknown_step():
    with pytest.raises(StepNotAvailableError):
        SessionReplayer().run(["jump"])


def test_replay_bad_position():
    with pytest.raises(ValueError):
        SessionReplayer().run([{"select": "polygon"}, {"click": [1, 2, 3]}])


@pytest.mark.parametrize("steps, message", [
    ([{"select": "polygon"}, "click"], "'click' needs an argument"),
    (["select"], "'select' needs an argument"),
    ([{"select": "circle"}, {"click": [0, 0]}, "wheel"], "'wheel' needs an argument"),
    ([{"finish": 1}], "'finish' takes no argument"),
    ([{"cancel": [0, 0]}], "'cancel' takes no argument"),
])
def test_replay_step_arity_is_checked_up_front(steps, message):
    replayer = SessionReplayer()
    with pytest.raises(ValueError, match=message):
        replayer.run(steps)
    assert replayer.result.steps_run == 0
    assert replayer.engine.mode is Mode.IDLE


def test_registry_check_reports_arity():
    registry = StepRegistry()
    registry.register('ping', lambda: None, "")
    registry.register('echo', lambda data: data, "", takes_argument=True)

    registry.check('ping')
    registry.check('echo', 0)
    assert registry.is_available('echo')
    assert not registry.is_available('pong')
    with pytest.raises(ValueError, match="needs an argument"):
        registry.execute('echo')
    with pytest.raises(ValueError, match="takes no argument"):
        registry.execute('ping', [1])


def test_main_bare_step_exits_with_error(tmp_path, capsys):
    script = write_script(tmp_path, "steps:\n  - select: polygon\n  - click\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["replay", str(script)])
    assert excinfo.value.code == 1
    assert "needs an argument" in capsys.readouterr().err


def test_load_yaml_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(tmp_path / "missing.yaml")
    with pytest.raises(ValueError):
        load_yaml_config(write_script(tmp_path, "- select: polygon\n"))


# ===== Entry point =====

def test_main_replay_prints_geojson(capsys):
    main(["replay", str(PARK_SCRIPT), "--kind", "rectangle"])

    output = json.loads(capsys.readouterr().out)
    assert output["type"] == "FeatureCollection"
    assert [f["properties"]["id"] for f in output["features"]] == [3]


def test_main_replay_with_config_and_snapshot(tmp_path, capsys):
    config = tmp_path / "draw.yaml"
    config.write_text("draw:\n  default_radius_m: 200\n")
    snapshot = tmp_path / "park.png"

    main(["replay", str(PARK_SCRIPT), "--config", str(config), "--snapshot", str(snapshot)])

    output = json.loads(capsys.readouterr().out)
    circle = [f for f in output["features"] if f["properties"]["kind"] == "circle"][0]
    assert circle["properties"]["radius_m"] == 240
    assert snapshot.exists()
    assert snapshot.stat().st_size > 0


def test_main_replay_failure_exits_nonzero(tmp_path, capsys):
    script = write_script(tmp_path, "steps:\n  - fly\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["replay", str(script)])
    assert excinfo.value.code == 1
    assert "fly" in capsys.readouterr().err


def test_main_circle(capsys):
    main(["circle", "127.0", "37.5", "100", "--steps", "8"])
    geometry = json.loads(capsys.readouterr().out)
    ring = geometry["coordinates"][0]
    assert len(ring) == 9
    assert ring[0] == ring[-1]


def test_main_distance(capsys):
    main(["distance", "0", "0", "0", "1"])
    assert float(capsys.readouterr().out) == pytest.approx(111_195, rel=1e-4)


def test_main_without_command():
    with pytest.raises(SystemExit):
        main([])
