"""ECS (Elastic Common Schema) JSON logging for the standard library logger."""

from ecs_logger.config import LoggerSettings, load_settings
from ecs_logger.event import ECS_VERSION, TRACE, CallSite, Event
from ecs_logger.extra_fields import (
    ExtraFields,
    InvalidJsonError,
    NotObjectError,
    SetExtraFieldsError,
    deep_merge,
)
from ecs_logger.formatter import EcsFormatter, EcsHandler
from ecs_logger.logger import (
    LoggerAlreadyInitializedError,
    clear_extra_fields,
    ecs_logging,
    init,
    set_extra_fields,
)

__all__ = [
    "__version__",
    "CallSite",
    "ECS_VERSION",
    "EcsFormatter",
    "EcsHandler",
    "Event",
    "ExtraFields",
    "InvalidJsonError",
    "LoggerAlreadyInitializedError",
    "LoggerSettings",
    "NotObjectError",
    "SetExtraFieldsError",
    "TRACE",
    "clear_extra_fields",
    "deep_merge",
    "ecs_logging",
    "init",
    "load_settings",
    "set_extra_fields",
]

__version__ = "0.1.0"
