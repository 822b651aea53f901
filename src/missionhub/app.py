# missionhub/app.py

import argparse
import logging
import sys
from pathlib import Path

from PySide6 import QtWidgets

from missionhub.ui.main_window import MainWindow
from missionhub.ui.style import APP_QSS
from missionhub.util.config import DEFAULT_CONFIG_NAME, load_console_config

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mission control operator console")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to console TOML (default: ./{DEFAULT_CONFIG_NAME})",
    )
    parser.add_argument("--no-video", action="store_true", help="Do not start GStreamer")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    # Qt consumes its own arguments (-platform, -style, ...)
    args, _ = parser.parse_known_args(argv)
    return args


# ---------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    """
    Application entry point.

    Responsibilities:
    - Load configuration and set up logging
    - Create QApplication
    - Apply global stylesheet
    - Create and show the MainWindow
    - Run the Qt event loop
    """
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    config = load_console_config(args.config)

    level_name = (args.log_level or config.log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)

    app = QtWidgets.QApplication([sys.argv[0], *argv])
    app.setApplicationName("Mission Control Hub")

    if APP_QSS:
        app.setStyleSheet(APP_QSS)

    w = MainWindow(config=config, enable_video=not args.no_video)
    w.resize(1280, 760)
    w.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
