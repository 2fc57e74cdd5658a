import logging

import structlog

from moonscale.config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure logging.

    - level comes from Settings.log_level (env LOG_LEVEL), default INFO
    - structlog events are emitted through stdlib logging alongside host handlers
    - an existing root handler only gets its level adjusted, nothing is added
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.strip().upper(), logging.INFO)

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
    else:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )

    if settings.is_debug:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=True)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
