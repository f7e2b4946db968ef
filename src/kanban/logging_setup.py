from __future__ import annotations

import logging
import sys

_APP_LOGGER_PREFIX = __name__.rsplit(".", 1)[0] + "."
_HANDLER_NAME = "kanban-console"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep board logs; let other libraries through only at WARNING and above.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(_APP_LOGGER_PREFIX):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: str = "INFO") -> None:
    """
    Attach a single stderr handler to the root logger.

    Safe to call more than once; a previously installed board handler is
    replaced rather than duplicated.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.set_name(_HANDLER_NAME)
    ch.setLevel(getattr(logging, level.upper(), logging.INFO))
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    logging.captureWarnings(True)
