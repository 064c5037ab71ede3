"""DataKnobs Validator Package

A fluent, composable validation engine for arguments and structured data.
"""

from .exceptions import (
    ConfigurationError,
    UsageError,
    ValidationError,
    ValidatorError,
)
from .modes import Mode
from .paths import get_path_value, is_nested_path, join_paths
from .pool import ObjectPool, set_pool_max_size
from .predicates import string_trim, string_trimmed_not_empty
from .result import NoopValidationResult, ValidationResult
from .rule_set import RuleSet
from .settings import (
    ValidatorSettings,
    configure,
    get_settings,
    load_settings,
)
from .surface import PredicateSurface
from .trace import disable_trace, enable_trace
from .validator import TestFunction, Validator

__version__ = "0.1.0"
__all__ = [
    "Mode",
    "PredicateSurface",
    "RuleSet",
    "TestFunction",
    "Validator",
    # Results
    "NoopValidationResult",
    "ValidationResult",
    # Exceptions
    "ConfigurationError",
    "UsageError",
    "ValidationError",
    "ValidatorError",
    # Settings
    "ValidatorSettings",
    "configure",
    "get_settings",
    "load_settings",
    # Tracing
    "disable_trace",
    "enable_trace",
    # Utilities
    "ObjectPool",
    "get_path_value",
    "is_nested_path",
    "join_paths",
    "set_pool_max_size",
    "string_trim",
    "string_trimmed_not_empty",
]
