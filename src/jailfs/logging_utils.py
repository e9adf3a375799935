"""Console logging for jail records.

Jails attach their label to every record they emit through
``extra={"jail": label}``. The helpers here format that label and can
narrow output to selected jails.
"""

import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

JAIL_LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] [%(jail)s] %(message)s"

# Package logger that every jailfs module logger propagates to.
PACKAGE_LOGGER = "jailfs"


class JailLogFilter(logging.Filter):
    """Fills in the ``jail`` attribute and optionally keeps only some jails.

    Records that were not emitted by a jail get ``"-"`` as their label.
    """

    def __init__(self, labels: Optional[Iterable[str]] = None) -> None:
        super().__init__()
        self.labels = frozenset(labels) if labels is not None else None

    def filter(self, record: logging.LogRecord) -> bool:
        label = getattr(record, "jail", None)
        record.jail = "-" if label is None else str(label)
        if self.labels is None:
            return True
        return record.jail in self.labels


def init_jail_logging(
    level: int = logging.INFO,
    clear_existing_handlers: bool = True,
    labels: Optional[Iterable[str]] = None,
) -> logging.Handler:
    """
    Send jailfs log records to the console, tagged with their jail label.

    The handler is attached to the ``jailfs`` package logger, so records from
    other libraries are left to the application's own configuration.

    Args:
        level: Level for the ``jailfs`` logger (e.g. logging.DEBUG to see refusals)
        clear_existing_handlers: If True, removes handlers already attached to
                                 the ``jailfs`` logger, so repeated calls do not
                                 duplicate output
        labels: Only show records from these jails (default: all)

    Returns:
        The installed stream handler.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    if clear_existing_handlers:
        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(JAIL_LOG_FORMAT))
    stream_handler.addFilter(JailLogFilter(labels))

    package_logger.addHandler(stream_handler)
    package_logger.setLevel(level)

    logger.debug(f"Jail logging enabled at {logging.getLevelName(level)}")
    return stream_handler
