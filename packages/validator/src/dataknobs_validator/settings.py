"""Settings for the validator package.

Settings come from (lowest to highest precedence) the defaults, an optional
YAML or JSON file, ``DATAKNOBS_VALIDATOR_<FIELD>`` environment variables and
keyword overrides passed to ``configure``.

Example:
    ```yaml
    # validator.yaml
    validator:
      pool_max_size: 20
      error_prefix: "Validation error:"
      mode: on_error_next_path
    ```

    ```python
    from dataknobs_validator import configure, load_settings

    configure(load_settings("validator.yaml"), trace=True)
    ```
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .exceptions import ConfigurationError, UsageError
from .modes import Mode
from .pool import set_pool_max_size
from .trace import enable_trace

logger = logging.getLogger(__name__)

ENV_PREFIX = "DATAKNOBS_VALIDATOR_"
SECTION = "validator"


@dataclass(frozen=True)
class ValidatorSettings:
    """Package-wide validator settings.

    Attributes:
        pool_max_size: Capacity of each (per thread) object pool
        trace: Whether predicate evaluations are traced
        error_prefix: Default error prefix of ``Validator.create()``
        mode: Default mode of ``Validator.create()``
    """

    pool_max_size: int = 10
    trace: bool = False
    error_prefix: str = ""
    mode: Mode = Mode.ON_ERROR_THROW

    def __post_init__(self):
        if isinstance(self.pool_max_size, bool) or not isinstance(self.pool_max_size, int):
            raise ConfigurationError(
                f"pool_max_size must be an integer, got {type(self.pool_max_size).__name__}",
                context={"field": "pool_max_size", "value": self.pool_max_size},
            )
        if self.pool_max_size < 0:
            raise ConfigurationError(
                f"pool_max_size must not be negative, got {self.pool_max_size}",
                context={"field": "pool_max_size", "value": self.pool_max_size},
            )
        if not isinstance(self.trace, bool):
            raise ConfigurationError(
                f"trace must be a boolean, got {type(self.trace).__name__}",
                context={"field": "trace", "value": self.trace},
            )
        if not isinstance(self.error_prefix, str):
            raise ConfigurationError(
                f"error_prefix must be a string, got {type(self.error_prefix).__name__}",
                context={"field": "error_prefix", "value": self.error_prefix},
            )
        try:
            # frozen dataclass, hence object.__setattr__
            object.__setattr__(self, "mode", Mode.coerce(self.mode))
        except UsageError as e:
            raise ConfigurationError(str(e), context={"field": "mode", "value": self.mode}) from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ValidatorSettings:
        """Create settings from a dictionary.

        A top-level ``validator`` section is used when present.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings must be a mapping, got {type(data).__name__}")
        if SECTION in data and isinstance(data[SECTION], dict):
            data = data[SECTION]
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown validator setting(s): {', '.join(map(str, unknown))}",
                context={"unknown": unknown, "known": sorted(known)},
            )
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> ValidatorSettings:
        """Load settings from a YAML or JSON file.

        Raises:
            ConfigurationError: If the file is missing, has an unsupported
                format or holds invalid settings
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Settings file not found: {path}", context={"path": str(path)})

        suffix = path.suffix.lower()
        with open(path) as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported file format: {suffix}", context={"path": str(path)})

        logger.debug(f"Loaded validator settings from {path}")
        return cls.from_dict(data or {})

    def with_env_overrides(self, environ: Dict[str, str] | None = None) -> ValidatorSettings:
        """Apply ``DATAKNOBS_VALIDATOR_<FIELD>`` environment variables.

        Args:
            environ: The environment to read; ``os.environ`` by default

        Returns:
            New settings, or these settings when no variable is set
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for f in fields(self):
            env_var = ENV_PREFIX + f.name.upper()
            if env_var in environ:
                overrides[f.name] = _parse_value(f.name, environ[env_var])
        if not overrides:
            return self
        logger.debug(f"Applying environment overrides: {sorted(overrides)}")
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data


def _parse_value(name: str, value: str) -> Any:
    """Parse an environment variable value for a settings field.

    Args:
        name: The field name
        value: String value from environment

    Returns:
        Parsed value (bool, int or the raw string)
    """
    if name == "trace":
        if value.lower() in ["true", "yes", "1", "on"]:
            return True
        elif value.lower() in ["false", "no", "0", "off", ""]:
            return False
        raise ConfigurationError(
            f"Invalid boolean for {ENV_PREFIX}TRACE: {value!r}",
            context={"field": name, "value": value},
        )

    if name == "pool_max_size":
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid integer for {ENV_PREFIX}POOL_MAX_SIZE: {value!r}",
                context={"field": name, "value": value},
            ) from e

    return value


_lock = threading.RLock()
_settings: ValidatorSettings | None = None


def load_settings(
    source: Union[str, Path, Dict[str, Any], ValidatorSettings, None] = None,
    use_env: bool = True,
) -> ValidatorSettings:
    """Load settings without activating them.

    Args:
        source: A settings file path, a dictionary, settings, or None for
            the defaults
        use_env: Whether environment variables override the source

    Returns:
        The loaded settings
    """
    if source is None:
        settings = ValidatorSettings()
    elif isinstance(source, ValidatorSettings):
        settings = source
    elif isinstance(source, dict):
        settings = ValidatorSettings.from_dict(source)
    elif isinstance(source, (str, Path)):
        settings = ValidatorSettings.from_file(source)
    else:
        raise ConfigurationError(f"Unsupported settings source: {type(source).__name__}")
    if use_env:
        settings = settings.with_env_overrides()
    return settings


def get_settings() -> ValidatorSettings:
    """Get the active settings, loading the defaults and environment on first use."""
    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
        return _settings


def configure(settings: ValidatorSettings | None = None, **overrides: Any) -> ValidatorSettings:
    """Activate settings.

    Resizes the object pools and switches tracing according to the new
    settings.

    Args:
        settings: The settings to activate; the active settings by default
        **overrides: Individual fields to override, e.g. ``trace=True``

    Returns:
        The now active settings

    Example:
        ```python
        configure(pool_max_size=50, mode="on_error_break")
        ```
    """
    global _settings
    with _lock:
        base = settings if settings is not None else get_settings()
        if overrides:
            known = {f.name for f in fields(ValidatorSettings)}
            unknown = sorted(set(overrides) - known)
            if unknown:
                raise ConfigurationError(
                    f"Unknown validator setting(s): {', '.join(unknown)}",
                    context={"unknown": unknown, "known": sorted(known)},
                )
            base = replace(base, **overrides)
        _settings = base

    set_pool_max_size(base.pool_max_size)
    enable_trace(base.trace)
    logger.debug(f"Validator settings configured: {base.to_dict()}")
    return base


def reset_settings() -> None:
    """Forget the active settings; the next ``get_settings()`` reloads them."""
    global _settings
    with _lock:
        _settings = None
