import os
import sys

from loguru import logger
from PySide6.QtCore import QtMsgType, qInstallMessageHandler


CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: "DEBUG",
    QtMsgType.QtInfoMsg: "INFO",
    QtMsgType.QtWarningMsg: "WARNING",
    QtMsgType.QtCriticalMsg: "ERROR",
    QtMsgType.QtFatalMsg: "CRITICAL",
}


def _qt_message_handler(mode, context, message):
    """Forward Qt's own diagnostics (e.g. geometry warnings) into loguru."""
    category = context.category or "qt"
    logger.opt(depth=1).log(_QT_LEVELS.get(mode, "INFO"), f"[{category}] {message}")


def _view_trace_filter(record) -> bool:
    """TRACE records pass only for the collection engine (pool/visibility churn)."""
    if record["level"].no > logger.level("TRACE").no:
        return True
    return record["name"].startswith("collectionview.ui.collection")


def setup_logging(debug_mode: bool = True, log_dir: str = "logs", trace_views: bool = False):
    """
    Configures Loguru logger.

    Console level is DEBUG in debug mode, INFO otherwise. trace_views drops
    the console to TRACE for the collection engine only, which shows every
    queue/dequeue in the reuse pool. Qt warnings are routed into the same
    sinks.
    """
    logger.remove()

    if trace_views:
        logger.add(sys.stderr, level="TRACE", format=CONSOLE_FORMAT, filter=_view_trace_filter)
    else:
        logger.add(sys.stderr, level="DEBUG" if debug_mode else "INFO", format=CONSOLE_FORMAT)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(
            os.path.join(log_dir, "collectionview_{time}.log"),
            rotation="10 MB", retention="1 week", level="DEBUG",
        )

    qInstallMessageHandler(_qt_message_handler)
    logger.info("Logging initialized.")
