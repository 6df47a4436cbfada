"""
Configuration Store - Typed teleop parameters with live updates.

The store owns an immutable TeleopConfig snapshot. Readers take the current
snapshot once per sample; updates are type-checked against the declared kind
of each parameter and swap in a whole new snapshot, so a reader never sees a
half-applied change.

Parameters can come from:
- Built-in defaults
- An optional .env file and TELEOP_* environment variables
- Live updates through ConfigStore.set_parameters()
"""

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from dotenv import load_dotenv

from .types import (
    ANGULAR_CHANNELS,
    CHANNELS,
    LINEAR_CHANNELS,
    UNMAPPED,
    AxisMap,
    Mode,
    ScaleGroups,
    ScaleMap,
)


logger = logging.getLogger(__name__)

ENV_PREFIX = "TELEOP_"
SCALE_GROUPS = ("normal", "turbo", "autorun")

# Parameter namespace per scale group
_LINEAR_SCALE_PREFIX = {
    "normal": "scale_linear",
    "turbo": "scale_linear_turbo",
    "autorun": "scale_linear_autorun",
}
_ANGULAR_SCALE_PREFIX = {
    "normal": "scale_angular",
    "turbo": "scale_angular_turbo",
    "autorun": "scale_angular_autorun",
}


class ConfigError(Exception):
    """Raised when startup configuration cannot be parsed"""


class ParameterType(Enum):
    """Declared kind of a parameter"""
    INTEGER = "integer"
    DOUBLE = "double"
    BOOL = "boolean"


def _declare_types() -> Dict[str, ParameterType]:
    types = {
        "require_enable_button": ParameterType.BOOL,
        "enable_button": ParameterType.INTEGER,
        "enable_turbo_button": ParameterType.INTEGER,
        "enable_autorun_button": ParameterType.INTEGER,
    }
    for channel in LINEAR_CHANNELS:
        types[f"axis_linear.{channel}"] = ParameterType.INTEGER
    for channel in ANGULAR_CHANNELS:
        types[f"axis_angular.{channel}"] = ParameterType.INTEGER
        types[f"axis_angular_adjustment.{channel}"] = ParameterType.INTEGER
    for group in SCALE_GROUPS:
        for channel in LINEAR_CHANNELS:
            types[f"{_LINEAR_SCALE_PREFIX[group]}.{channel}"] = ParameterType.DOUBLE
        for channel in ANGULAR_CHANNELS:
            types[f"{_ANGULAR_SCALE_PREFIX[group]}.{channel}"] = ParameterType.DOUBLE
    return types


PARAMETER_TYPES: Dict[str, ParameterType] = _declare_types()


@dataclass(frozen=True)
class TeleopConfig:
    """
    Immutable snapshot of all teleop parameters.

    axes combines axis_linear.* and axis_angular.*; adjustment_axes holds
    axis_angular_adjustment.* (only used in autorun for extra yaw input).
    """
    require_enable_button: bool = True
    enable_button: int = 5
    enable_turbo_button: int = UNMAPPED
    enable_autorun_button: int = UNMAPPED
    axes: AxisMap = AxisMap(x=5, yaw=2)
    adjustment_axes: AxisMap = AxisMap(yaw=3)
    scales: ScaleGroups = ScaleGroups()

    def scale_for(self, mode: Union[Mode, str]) -> ScaleMap:
        """Get the scale group for an active mode (or group name)"""
        group = mode.value if isinstance(mode, Mode) else mode
        return self.scales.group(group)

    def to_parameters(self) -> Dict[str, Any]:
        """Flatten to dotted parameter names"""
        params: Dict[str, Any] = {
            "require_enable_button": self.require_enable_button,
            "enable_button": self.enable_button,
            "enable_turbo_button": self.enable_turbo_button,
            "enable_autorun_button": self.enable_autorun_button,
        }
        for channel in LINEAR_CHANNELS:
            params[f"axis_linear.{channel}"] = self.axes.index(channel)
        for channel in ANGULAR_CHANNELS:
            params[f"axis_angular.{channel}"] = self.axes.index(channel)
            params[f"axis_angular_adjustment.{channel}"] = self.adjustment_axes.index(channel)
        for group in SCALE_GROUPS:
            scales = self.scale_for(group)
            for channel in LINEAR_CHANNELS:
                params[f"{_LINEAR_SCALE_PREFIX[group]}.{channel}"] = scales.scale(channel)
            for channel in ANGULAR_CHANNELS:
                params[f"{_ANGULAR_SCALE_PREFIX[group]}.{channel}"] = scales.scale(channel)
        return params

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> "TeleopConfig":
        """
        Build a snapshot from dotted parameter names.

        Missing names keep their defaults; unknown names are ignored.
        Values are assumed to be type-checked already.
        """
        merged = cls().to_parameters()
        merged.update({name: value for name, value in params.items() if name in PARAMETER_TYPES})

        axes = AxisMap(
            x=merged["axis_linear.x"],
            y=merged["axis_linear.y"],
            z=merged["axis_linear.z"],
            yaw=merged["axis_angular.yaw"],
            pitch=merged["axis_angular.pitch"],
            roll=merged["axis_angular.roll"],
        )
        adjustment_axes = AxisMap(
            yaw=merged["axis_angular_adjustment.yaw"],
            pitch=merged["axis_angular_adjustment.pitch"],
            roll=merged["axis_angular_adjustment.roll"],
        )
        scales = {}
        for group in SCALE_GROUPS:
            values = {}
            for channel in LINEAR_CHANNELS:
                values[channel] = merged[f"{_LINEAR_SCALE_PREFIX[group]}.{channel}"]
            for channel in ANGULAR_CHANNELS:
                values[channel] = merged[f"{_ANGULAR_SCALE_PREFIX[group]}.{channel}"]
            scales[group] = ScaleMap(**values)

        return cls(
            require_enable_button=merged["require_enable_button"],
            enable_button=merged["enable_button"],
            enable_turbo_button=merged["enable_turbo_button"],
            enable_autorun_button=merged["enable_autorun_button"],
            axes=axes,
            adjustment_axes=adjustment_axes,
            scales=ScaleGroups(**scales),
        )


@dataclass
class SetParametersResult:
    """Outcome of a live parameter update"""
    successful: bool = True
    reason: str = ""


def check_parameter_type(name: str, value: Any) -> Optional[str]:
    """
    Check a value against the declared kind of a parameter.

    Args:
        name: Dotted parameter name
        value: Proposed value

    Returns:
        Rejection reason, or None if the value is acceptable
        (unknown names are always acceptable)
    """
    kind = PARAMETER_TYPES.get(name)
    if kind is None:
        return None

    # bool is an int subclass, so it has to be excluded explicitly
    if kind == ParameterType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            return f"Only integer values can be set for '{name}'."
    elif kind == ParameterType.DOUBLE:
        if not isinstance(value, float):
            return f"Only double values can be set for '{name}'."
    elif kind == ParameterType.BOOL:
        if not isinstance(value, bool):
            return f"Only boolean values can be set for '{name}'."
    return None


UpdateCallback = Callable[[TeleopConfig, TeleopConfig], Any]


class ConfigStore:
    """
    Holds the current TeleopConfig and applies live updates.

    Thread-safe: updates may arrive from any thread, readers always get
    a complete snapshot.
    """

    def __init__(self, config: Optional[TeleopConfig] = None) -> None:
        """
        Initialize store.

        Args:
            config: Initial snapshot (defaults if omitted)
        """
        self._config = config or TeleopConfig()
        self._version = 0
        self._lock = threading.Lock()
        self._callbacks: List[UpdateCallback] = []

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> "ConfigStore":
        """
        Create a store from dotted parameter names, type-checking each value.

        Raises:
            ConfigError: If any value has the wrong type
        """
        for name, value in params.items():
            reason = check_parameter_type(name, value)
            if reason:
                raise ConfigError(reason)
        return cls(TeleopConfig.from_parameters(params))

    def snapshot(self) -> TeleopConfig:
        """Get the current configuration snapshot"""
        return self._config

    @property
    def version(self) -> int:
        """Number of accepted updates so far"""
        return self._version

    def get_parameter(self, name: str) -> Any:
        """
        Get a single parameter value.

        Raises:
            KeyError: If the parameter is not declared
        """
        if name not in PARAMETER_TYPES:
            raise KeyError(f"Unknown parameter '{name}'")
        return self._config.to_parameters()[name]

    def parameters(self) -> Dict[str, Any]:
        """All parameters of the current snapshot"""
        return self._config.to_parameters()

    def add_update_callback(self, callback: UpdateCallback) -> None:
        """
        Register callback for accepted updates.

        Callback signature: callback(old_config, new_config)
        """
        self._callbacks.append(callback)

    def set_parameters(self, params: Mapping[str, Any]) -> SetParametersResult:
        """
        Apply a batch of parameter changes.

        Every value is type-checked first; a single mismatch rejects the
        whole batch and leaves the current snapshot untouched.

        Args:
            params: Dotted parameter name -> new value

        Returns:
            SetParametersResult with a reason when rejected
        """
        for name, value in params.items():
            reason = check_parameter_type(name, value)
            if reason:
                logger.warning(reason)
                return SetParametersResult(successful=False, reason=reason)

        known = {name: value for name, value in params.items() if name in PARAMETER_TYPES}
        for name in params:
            if name not in known:
                logger.debug(f"Ignoring unknown parameter '{name}'")
        if not known:
            return SetParametersResult()

        with self._lock:
            old = self._config
            merged = old.to_parameters()
            merged.update(known)
            new = TeleopConfig.from_parameters(merged)
            self._config = new
            self._version += 1

        for name, value in known.items():
            logger.info(f"Parameter {name} = {value}")

        for callback in self._callbacks:
            try:
                callback(old, new)
            except Exception as e:
                logger.error(f"Error in config update callback: {e}", exc_info=True)

        return SetParametersResult()


def parse_parameter_value(name: str, text: str) -> Any:
    """
    Parse a string into the declared kind of a parameter.

    Used for environment variables and command-line overrides.

    Args:
        name: Dotted parameter name
        text: Raw string value

    Returns:
        Parsed value (int, float or bool)

    Raises:
        ConfigError: If the name is unknown or the text does not parse
    """
    kind = PARAMETER_TYPES.get(name)
    if kind is None:
        raise ConfigError(f"Unknown parameter '{name}'")

    text = text.strip()
    try:
        if kind == ParameterType.INTEGER:
            return int(text)
        if kind == ParameterType.DOUBLE:
            return float(text)
    except ValueError:
        raise ConfigError(f"Invalid {kind.value} value for '{name}': {text!r}") from None

    lowered = text.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"Invalid boolean value for '{name}': {text!r}")


def env_name(name: str) -> str:
    """Environment variable for a parameter (axis_linear.x -> TELEOP_AXIS_LINEAR__X)"""
    return ENV_PREFIX + name.upper().replace(".", "__")


def load_env_config(env_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Read parameters from a .env file and TELEOP_* environment variables.

    Variables already set in the environment win over the .env file.

    Args:
        env_file: Path to .env file (default: .env in current directory)

    Returns:
        Dotted parameter name -> parsed value, only for variables present

    Raises:
        ConfigError: If a variable does not parse
    """
    path = Path(env_file) if env_file is not None else Path(".env")
    if path.exists():
        load_dotenv(path)
        logger.info(f"Loaded environment from {path}")
    elif env_file is not None:
        raise ConfigError(f"Environment file not found: {path}")

    params: Dict[str, Any] = {}
    for name in PARAMETER_TYPES:
        raw = os.getenv(env_name(name))
        if raw is None:
            continue
        try:
            params[name] = parse_parameter_value(name, raw)
        except ConfigError as e:
            raise ConfigError(f"{env_name(name)}: {e}") from None
    return params


def log_summary(config: TeleopConfig) -> None:
    """Log the effective mapping the way operators expect to see it at startup"""
    turbo = config.enable_turbo_button >= 0
    autorun = config.enable_autorun_button >= 0

    if config.require_enable_button:
        logger.info(f"Teleop enable button {config.enable_button}.")
    if turbo:
        logger.info(f"Turbo on button {config.enable_turbo_button}.")
    if autorun:
        logger.info(f"Autorun toggle on button {config.enable_autorun_button}.")

    normal = config.scale_for("normal")
    turbo_scales = config.scale_for("turbo")
    for channel in CHANNELS:
        index = config.axes.index(channel)
        if index == UNMAPPED:
            continue
        kind = "Linear" if channel in LINEAR_CHANNELS else "Angular"
        logger.info(f"{kind} axis {channel} on {index} at scale {normal.scale(channel):f}.")
        if turbo:
            logger.info(
                f"Turbo for {kind.lower()} axis {channel} is scale {turbo_scales.scale(channel):f}."
            )

    if autorun:
        scales = config.scale_for("autorun")
        logger.info(f"Autorun forward limit {scales.x:f}, yaw limit {scales.yaw:f}.")
        adjust = config.adjustment_axes.index("yaw")
        if adjust != UNMAPPED:
            logger.info(f"Autorun yaw adjustment on axis {adjust}.")
