import logging
import sys

import structlog

# Chatty at INFO while a model loads or a connection is retried
_QUIET_LOGGERS = ("ultralytics", "redis")


def _pre_chain() -> list:
    """Processors applied to structlog and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    log_format: str = "console",
    log_level: str = "INFO",
    service: str | None = None,
) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Args:
        log_format: "console" while developing, "json" for one object per line.
        log_level: DEBUG, INFO, WARNING or ERROR. Unknown values mean INFO.
        service: When set, bound as ``service`` on every line of this process.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if service:
        structlog.contextvars.bind_contextvars(service=service)


def bind_camera(camera_id: str) -> None:
    """Attach camera_id to every log line emitted from the current context."""
    structlog.contextvars.bind_contextvars(camera_id=camera_id)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
