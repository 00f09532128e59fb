from __future__ import annotations

import logging
import sys

_HANDLER_NAME = "task_tracker.console"


class _ThirdPartyNoiseFilter(logging.Filter):
    """
    Keep every task_tracker record; let other libraries through only at WARNING+.
    uvicorn's access/error loggers are left to uvicorn's own configuration.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("task_tracker"):
            return True
        return record.levelno >= logging.WARNING


# PUBLIC_INTERFACE
def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure a single stderr handler on the root logger.

    Safe to call more than once (e.g. once per created app in tests): the
    handler installed by a previous call is replaced, other handlers are kept.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
