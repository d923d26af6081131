from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler
from PySide6.QtWidgets import QApplication

from recordnow.app import config
from recordnow.app.ui.main_window import MainWindow

# ============================================================================
# DEBUG CONFIGURATION - Environment Variables
# ============================================================================
# RECORDNOW_DEBUG                    - DEBUG-level logging for every module
# RECORDNOW_DETAILED_PAGE_LOGGING    - Per-document load timing (PageLoadLogger)
# RECORDNOW_CONFIG                   - Alternate path for the JSON settings file
#
# Examples:
#   RECORDNOW_DEBUG=1 recordnow ~/notes
#   recordnow --local
# ============================================================================

logger = logging.getLogger(__name__)


def _debug_enabled(var_name: str) -> bool:
    """Check if a debug flag is enabled."""
    return os.getenv(var_name, "0") not in ("0", "false", "False", "", None)


def _configure_logging() -> None:
    level = logging.DEBUG if _debug_enabled("RECORDNOW_DEBUG") else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _qt_message_handler(mode: QtMsgType, context, message: str) -> None:
    """Route Qt messages into logging, dropping known harmless noise."""
    if "QTextCursor::setPosition" in message:
        return
    if "Accessible invalid" in message or "Could not find accessible on path" in message:
        return
    qt_logger = logging.getLogger("qt")
    if mode == QtMsgType.QtDebugMsg:
        qt_logger.debug(message)
    elif mode == QtMsgType.QtWarningMsg:
        qt_logger.warning(message)
    elif mode == QtMsgType.QtCriticalMsg:
        qt_logger.error(message)
    elif mode == QtMsgType.QtFatalMsg:
        qt_logger.critical(message)
        sys.exit(1)
    else:
        qt_logger.info(message)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="RecordNow hybrid Markdown editor.")
    parser.add_argument("folder", nargs="?", help="Folder of Markdown documents to open at startup.")
    parser.add_argument("--local", action="store_true", help="Start with local storage instead of a folder.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging()
    qInstallMessageHandler(_qt_message_handler)
    config.init_settings()
    logger.info("Starting RecordNow (config %s)", config.GLOBAL_CONFIG)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("RecordNow")
    window = MainWindow(folder=args.folder, use_local=args.local)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
