"""Configuration wrapper providing typed access, schema defaults and loading."""

from __future__ import annotations

import difflib
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiofiles

from .constants import (
    CONFIG_SECTION,
    CONTROL,
    DEFAULT_BUFFER_SIZE,
    DEFAULT_LISTEN_BACKLOG,
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_MAX_OUTBOUND_SIZE,
)
from .models import WinctlError

if TYPE_CHECKING:
    import logging

__all__ = [
    "BOOL_FALSE_STRINGS",
    "ConfigField",
    "ConfigItems",
    "Configuration",
    "WINCTL_CONFIG_SCHEMA",
    "coerce_to_bool",
    "load_config",
]

ConfigValueType = float | bool | str | list | dict

BOOL_FALSE_STRINGS = frozenset({"false", "no", "off", "0", "disabled"})


def coerce_to_bool(value: ConfigValueType | None, default: bool = False) -> bool:
    """Coerce a value to boolean, handling loose typing.

    Args:
        value: The value to coerce
        default: Default value if value is None

    Behavior:
        - None → default
        - Empty string → False
        - Explicit falsy strings ("false", "no", "off", "0", "disabled") → False
        - Any other non-empty string → True
        - Non-string values → bool(value)
    """
    if value is None:
        return default
    if isinstance(value, str):
        if not value.strip():
            return False
        return value.lower().strip() not in BOOL_FALSE_STRINGS
    return bool(value)


@dataclass
class ConfigField:
    """Describes an expected configuration field.

    Attributes:
        name: The configuration key name
        field_type: Expected type
        default: Default value if not provided
        description: Human-readable description
        minimum: Lowest accepted value for integers
    """

    name: str
    field_type: type = str
    default: Any = None
    description: str = ""
    minimum: int | None = None


class ConfigItems(list):
    """A list of ConfigField items with lookup by name."""

    def __init__(self, *args: ConfigField) -> None:
        super().__init__(args)

    def get(self, name: str) -> ConfigField | None:
        """Get a ConfigField by name."""
        for prop in self:
            if prop.name == name:
                return prop
        return None

    @property
    def names(self) -> list[str]:
        """Return the known key names."""
        return [prop.name for prop in self]


WINCTL_CONFIG_SCHEMA = ConfigItems(
    ConfigField("socket_path", str, default=CONTROL, description="Path of the control socket"),
    ConfigField("buffer_size", int, default=DEFAULT_BUFFER_SIZE, description="Initial receive buffer size per client", minimum=2),
    ConfigField("max_message_size", int, default=DEFAULT_MAX_MESSAGE_SIZE, description="Longest accepted command line", minimum=1),
    ConfigField("max_outbound_size", int, default=DEFAULT_MAX_OUTBOUND_SIZE, description="Pending output allowed per client", minimum=1),
    ConfigField("listen_backlog", int, default=DEFAULT_LISTEN_BACKLOG, description="listen() backlog", minimum=1),
    ConfigField("colored_handlers_log", bool, default=True, description="Colorize dispatched commands in debug logs"),
)


class Configuration(dict):
    """Configuration wrapper providing typed access.

    Optionally accepts a schema to provide default values automatically.
    """

    def __init__(
        self,
        *args: Any,  # noqa: ANN401
        logger: logging.Logger,
        schema: ConfigItems | None = None,
        **kwargs: Any,  # noqa: ANN401
    ):
        super().__init__(*args, **kwargs)
        self.log = logger
        self.schema = schema or ConfigItems()
        self._schema_defaults = {field.name: field.default for field in self.schema if field.default is not None}

    def get(self, name: str, default: ConfigValueType | None = None) -> ConfigValueType | None:  # type: ignore[override]
        """Get a value with schema-aware defaults.

        Args:
            name: The configuration key
            default: Fallback if key is missing and not in schema defaults
        """
        if name in self:
            return dict.get(self, name)  # type: ignore[return-value]
        if name in self._schema_defaults:
            return self._schema_defaults[name]
        return default

    def get_bool(self, name: str, default: bool = False) -> bool:
        """Get a boolean value, handling loose typing."""
        return coerce_to_bool(self.get(name), default)

    def get_int(self, name: str, default: int = 0) -> int:
        """Get an integer value.

        Invalid values fall back to the schema default, then to `default`.

        Args:
            name: The key name
            default: Default value if key is missing or invalid
        """
        fallback = self._schema_defaults.get(name, default)
        value = self.get(name)
        if value is None:
            return fallback
        try:
            return int(value)  # type: ignore[arg-type]
        except (ValueError, TypeError):
            self.log.warning("Invalid integer value for %s: %s", name, value)
            return fallback

    def get_str(self, name: str, default: str = "") -> str:
        """Get a string value."""
        value = self.get(name)
        if value is None:
            return default
        return str(value)

    def value_errors(self) -> list[str]:
        """Return the problems found in the values of known options."""
        errors = []
        for field in self.schema:
            if field.name in self and field.field_type is int:
                value = dict.get(self, field.name)
                minimum = 1 if field.minimum is None else field.minimum
                # bool is an int subclass
                if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
                    errors.append(f'Option "{field.name}" must be an integer >= {minimum}, got {value!r}')
        return errors

    def validate(self) -> list[str]:
        """Return a list of problems found in the configuration."""
        errors = []
        for key in self:
            if self.schema.get(key) is None:
                matches = difflib.get_close_matches(key, self.schema.names, n=1)
                hint = f', did you mean "{matches[0]}"?' if matches else ""
                errors.append(f'Unknown option "{key}"{hint}')
        return errors + self.value_errors()


async def load_config(filename: str | Path, logger: logging.Logger) -> Configuration:
    """Load the `[winctl]` section of a TOML file.

    A missing file yields the defaults, unknown options are only reported.

    Raises:
        WinctlError: the file can't be parsed or holds invalid values

    Args:
        filename: Path to the configuration file
        logger: Logger used to report problems
    """
    fname = Path(filename).expanduser()
    data: dict[str, Any] = {}
    if fname.exists():
        logger.info("Loading %s", fname)
        async with aiofiles.open(fname, "rb") as f:
            raw = await f.read()
        try:
            data = tomllib.loads(raw.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            logger.critical("Problem reading %s: %s", fname, e)
            raise WinctlError from e
    else:
        logger.debug("No config file at %s, using defaults", fname)

    config = Configuration(data.get(CONFIG_SECTION, {}), logger=logger, schema=WINCTL_CONFIG_SCHEMA)
    for error in config.validate():
        logger.error(error)
    if config.value_errors():
        msg = f"invalid configuration in {fname}"
        raise WinctlError(msg)
    return config
