"""Tests for the configuration store"""

import dataclasses
import os

import pytest
from teleop.config import (
    PARAMETER_TYPES,
    ConfigError,
    ConfigStore,
    ParameterType,
    TeleopConfig,
    check_parameter_type,
    env_name,
    load_env_config,
    parse_parameter_value,
)
from teleop.types import UNMAPPED, AxisMap, Mode, ScaleGroups, ScaleMap


@pytest.fixture
def store():
    return ConfigStore()


@pytest.fixture
def clean_env():
    """Remove TELEOP_* variables for the test and restore them afterwards"""
    names = [env_name(name) for name in PARAMETER_TYPES]
    saved = {name: os.environ.pop(name) for name in names if name in os.environ}
    yield
    for name in names:
        os.environ.pop(name, None)
    os.environ.update(saved)


def test_defaults():
    """Test default parameters"""
    config = TeleopConfig()

    assert config.require_enable_button is True
    assert config.enable_button == 5
    assert config.enable_turbo_button == UNMAPPED
    assert config.enable_autorun_button == UNMAPPED
    assert config.axes == AxisMap(x=5, yaw=2)
    assert config.adjustment_axes == AxisMap(yaw=3)
    assert config.scale_for(Mode.NORMAL).x == 0.5
    assert config.scale_for(Mode.NORMAL).yaw == 0.5
    assert config.scale_for(Mode.TURBO).x == 1.0
    assert config.scale_for("autorun").yaw == 1.0
    assert config.scale_for("autorun").y == 0.0


def test_config_is_hashable_and_frozen():
    """Test snapshots, scale groups included, cannot be edited in place"""
    config = TeleopConfig.from_parameters({"scale_linear_turbo.x": 2.0})

    assert isinstance(config.scales, ScaleGroups)
    assert hash(config) == hash(TeleopConfig.from_parameters({"scale_linear_turbo.x": 2.0}))
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.scales.normal = ScaleMap(x=9.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.scales.turbo.x = 9.0
    assert config.scale_for(Mode.TURBO).x == 2.0


def test_scale_for_unknown_group():
    """Test an unknown group name reads as all-zero scales"""
    assert TeleopConfig().scale_for("bogus") == ScaleMap()


def test_parameter_declarations():
    """Test every recognized option is declared with its kind"""
    assert len(PARAMETER_TYPES) == 31
    assert PARAMETER_TYPES["require_enable_button"] == ParameterType.BOOL
    assert PARAMETER_TYPES["enable_autorun_button"] == ParameterType.INTEGER
    assert PARAMETER_TYPES["axis_angular_adjustment.roll"] == ParameterType.INTEGER
    assert PARAMETER_TYPES["scale_linear_autorun.z"] == ParameterType.DOUBLE
    assert PARAMETER_TYPES["scale_angular_turbo.pitch"] == ParameterType.DOUBLE
    assert "axis_angular_adjustment.x" not in PARAMETER_TYPES


def test_parameters_round_trip():
    """Test flat parameters rebuild the same snapshot"""
    config = TeleopConfig.from_parameters({
        "enable_turbo_button": 4,
        "axis_angular.pitch": 1,
        "scale_angular_turbo.pitch": 0.75,
    })

    assert config.enable_turbo_button == 4
    assert config.axes.index("pitch") == 1
    assert config.scale_for("turbo").pitch == 0.75
    assert TeleopConfig.from_parameters(config.to_parameters()) == config


def test_snapshot_unchanged_by_update(store):
    """Test an update swaps snapshots instead of editing them"""
    before = store.snapshot()

    result = store.set_parameters({"scale_linear.x": 0.8})

    assert result.successful is True
    assert before.scale_for("normal").x == 0.5
    assert store.snapshot().scale_for("normal").x == 0.8
    assert store.version == 1


def test_reject_non_integer_enable_button(store):
    """Test a wrong type is rejected with the parameter name in the reason"""
    result = store.set_parameters({"enable_button": 2.5})

    assert result.successful is False
    assert "enable_button" in result.reason
    assert "integer" in result.reason
    assert store.snapshot().enable_button == 5
    assert store.version == 0


def test_reject_bool_for_integer(store):
    """Test bool is not accepted as an integer"""
    result = store.set_parameters({"axis_linear.x": True})

    assert result.successful is False
    assert store.get_parameter("axis_linear.x") == 5


def test_reject_int_for_double(store):
    """Test double parameters need a float value"""
    result = store.set_parameters({"scale_angular.yaw": 1})

    assert result.successful is False
    assert result.reason == "Only double values can be set for 'scale_angular.yaw'."


def test_reject_non_bool(store):
    """Test bool parameters need a bool value"""
    result = store.set_parameters({"require_enable_button": 0})

    assert result.successful is False
    assert result.reason == "Only boolean values can be set for 'require_enable_button'."
    assert store.get_parameter("require_enable_button") is True


def test_rejected_batch_applies_nothing(store):
    """Test one bad value rejects the whole batch"""
    result = store.set_parameters({
        "enable_button": 3,
        "scale_linear.x": "fast",
    })

    assert result.successful is False
    assert "scale_linear.x" in result.reason
    assert store.get_parameter("enable_button") == 5
    assert store.get_parameter("scale_linear.x") == 0.5


def test_unknown_parameters_ignored(store):
    """Test unknown names are accepted but change nothing"""
    result = store.set_parameters({"use_sim_time": "yes"})

    assert result.successful is True
    assert store.version == 0
    assert store.snapshot() == TeleopConfig()


def test_update_callback(store):
    """Test callbacks see old and new snapshots"""
    calls = []
    store.add_update_callback(lambda old, new: calls.append((old, new)))

    store.set_parameters({"enable_autorun_button": 7})

    assert len(calls) == 1
    old, new = calls[0]
    assert old.enable_autorun_button == UNMAPPED
    assert new.enable_autorun_button == 7


def test_failing_callback_does_not_break_update(store):
    """Test callback errors are contained"""
    def broken(old, new):
        raise RuntimeError("boom")

    store.add_update_callback(broken)

    result = store.set_parameters({"enable_button": 0})

    assert result.successful is True
    assert store.get_parameter("enable_button") == 0


def test_rejected_update_skips_callbacks(store):
    """Test callbacks only run for accepted updates"""
    calls = []
    store.add_update_callback(lambda old, new: calls.append(new))

    store.set_parameters({"enable_button": "5"})

    assert calls == []


def test_get_parameter_unknown(store):
    """Test unknown parameter lookup"""
    with pytest.raises(KeyError):
        store.get_parameter("max_speed")


def test_store_from_parameters_type_checks():
    """Test startup parameters are type-checked too"""
    with pytest.raises(ConfigError, match="enable_turbo_button"):
        ConfigStore.from_parameters({"enable_turbo_button": "4"})


def test_check_parameter_type():
    """Test type checks per kind"""
    assert check_parameter_type("enable_button", 3) is None
    assert check_parameter_type("scale_linear.x", -0.5) is None
    assert check_parameter_type("require_enable_button", False) is None
    assert check_parameter_type("not_a_parameter", object()) is None
    assert check_parameter_type("enable_button", None) is not None


def test_parse_parameter_value():
    """Test string parsing per declared kind"""
    assert parse_parameter_value("enable_button", " 4 ") == 4
    assert parse_parameter_value("axis_linear.y", "-1") == -1
    assert parse_parameter_value("scale_linear.x", "0.75") == 0.75
    assert parse_parameter_value("scale_linear.x", "1") == 1.0
    assert isinstance(parse_parameter_value("scale_linear.x", "1"), float)
    assert parse_parameter_value("require_enable_button", "false") is False
    assert parse_parameter_value("require_enable_button", "ON") is True


def test_parse_parameter_value_errors():
    """Test unparseable strings raise ConfigError"""
    with pytest.raises(ConfigError):
        parse_parameter_value("enable_button", "five")
    with pytest.raises(ConfigError):
        parse_parameter_value("scale_linear.x", "")
    with pytest.raises(ConfigError):
        parse_parameter_value("require_enable_button", "maybe")
    with pytest.raises(ConfigError):
        parse_parameter_value("max_speed", "1.0")


def test_env_name():
    """Test environment variable naming"""
    assert env_name("enable_button") == "TELEOP_ENABLE_BUTTON"
    assert env_name("axis_linear.x") == "TELEOP_AXIS_LINEAR__X"
    assert env_name("scale_angular_autorun.yaw") == "TELEOP_SCALE_ANGULAR_AUTORUN__YAW"


def test_load_env_config_from_file(tmp_path, clean_env):
    """Test parameters are read from a .env file"""
    env_file = tmp_path / "robot.env"
    env_file.write_text(
        "TELEOP_AXIS_LINEAR__X=1\n"
        "TELEOP_REQUIRE_ENABLE_BUTTON=false\n"
        "TELEOP_SCALE_LINEAR_TURBO__X=2.5\n"
    )

    params = load_env_config(str(env_file))

    assert params == {
        "axis_linear.x": 1,
        "require_enable_button": False,
        "scale_linear_turbo.x": 2.5,
    }
    store = ConfigStore.from_parameters(params)
    assert store.snapshot().axes.index("x") == 1


def test_environment_wins_over_file(tmp_path, clean_env, monkeypatch):
    """Test variables already set are not overridden by the file"""
    env_file = tmp_path / "robot.env"
    env_file.write_text("TELEOP_ENABLE_BUTTON=2\n")
    monkeypatch.setenv("TELEOP_ENABLE_BUTTON", "7")

    params = load_env_config(str(env_file))

    assert params["enable_button"] == 7


def test_load_env_config_default_file_missing(tmp_path, clean_env, monkeypatch):
    """Test a missing default .env is fine"""
    monkeypatch.chdir(tmp_path)
    assert load_env_config() == {}


def test_load_env_config_explicit_file_missing(tmp_path, clean_env):
    """Test a missing explicit file is an error"""
    with pytest.raises(ConfigError, match="not found"):
        load_env_config(str(tmp_path / "missing.env"))


def test_load_env_config_bad_value(clean_env, monkeypatch, tmp_path):
    """Test a bad variable names the variable"""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TELEOP_ENABLE_TURBO_BUTTON", "L1")

    with pytest.raises(ConfigError, match="TELEOP_ENABLE_TURBO_BUTTON"):
        load_env_config()
