import logging.config
import sys
import structlog
import orjson
from typing import Any, Dict, List, Mapping


# Third-party loggers that are too chatty at INFO for a CLI run
QUIET_LOGGERS = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "uvicorn.access": "WARNING",
}


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]


def setup_logging(
    debug: bool = False,
    level: str = "INFO",
    quiet: Mapping[str, str] = QUIET_LOGGERS,
) -> Dict[str, Any]:
    """
    Configures structlog and returns the matching dictConfig.

    Everything is written to stderr: stdout carries report lines only, so
    `streamtally payout X 3 > amount.txt` stays clean. Debug mode renders
    colored console lines, otherwise one orjson document per record.
    """
    processors = _shared_processors()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.dev.ConsoleRenderer()
        if debug
        else structlog.processors.JSONRenderer(serializer=orjson.dumps)
    )

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": renderer,
                "foreign_pre_chain": processors,
            },
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": sys.stderr,
            },
        },
        "root": {"handlers": ["stderr"], "level": "DEBUG" if debug else level},
        "loggers": {
            name: {"level": quiet_level}
            for name, quiet_level in quiet.items()
        },
    }


def configure_logging(debug: bool = False, level: str = "INFO"):
    logging.config.dictConfig(setup_logging(debug=debug, level=level))
