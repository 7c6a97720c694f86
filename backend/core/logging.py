"""
Logging setup and component loggers.

The backend logs through the standard library ``logging`` module. The root
handler is configured once by the application entry point via
``configure_logging``; everything else receives a logger through its
constructor instead of reaching for module-level singletons.

``get_component_logger`` returns a ``logging.LoggerAdapter`` bound to a
component name. The adapter prefixes each message with ``[component]`` and
attaches ``component`` to the record's ``extra`` so handlers and formatters can
filter on it.

Usage:
    from backend.core.logging import get_component_logger

    class OverviewService:
        def __init__(self, pool, logger=None):
            self.logger = logger or get_component_logger('OverviewService')

        async def get_overview(self):
            self.logger.info("Computing overview metrics")
"""

import logging
from typing import Any, MutableMapping, Optional, Tuple, Union


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Parent logger name for all component loggers
ROOT_LOGGER_NAME = 'backend'


def configure_logging(level: Union[str, int] = logging.INFO) -> None:
    """
    Configure the root logging handler.

    Args:
        level: Logging level name ('INFO', 'DEBUG', ...) or numeric level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)


class ComponentLogger(logging.LoggerAdapter):
    """LoggerAdapter that tags every record with the owning component name."""

    def __init__(self, logger: logging.Logger, component: str, extra: Optional[dict] = None):
        merged = {'component': component}
        merged.update(extra or {})
        super().__init__(logger, merged)
        self.component = component

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra)
        extra.update(kwargs.get('extra') or {})
        kwargs['extra'] = extra
        return f"[{self.component}] {msg}", kwargs


def get_component_logger(component: str, logger: Optional[logging.Logger] = None) -> ComponentLogger:
    """
    Build a component logger.

    Args:
        component: Component name shown in the message prefix.
        logger: Underlying logger; defaults to ``backend.<component>``.

    Returns:
        ComponentLogger wrapping the underlying logger.
    """
    base = logger or logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")
    return ComponentLogger(base, component)
