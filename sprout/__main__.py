"""Allow running Sprout as a module: python -m sprout."""

import sys

from PyQt6.QtWidgets import QApplication

from .app import SproutTray
from .database.db import init_db
from .logger import configure_logging
from .settings import LOG_DIR, load_settings


def main() -> None:
    settings = load_settings()
    log = configure_logging(
        settings.log_level, LOG_DIR, console=settings.log_to_console,
    )
    init_db()
    log.info("Sprout ready")

    app = QApplication(sys.argv)
    app.setApplicationName("Sprout")
    app.setOrganizationName("Sprout")
    app.setQuitOnLastWindowClosed(False)

    tray = SproutTray(settings=settings)  # noqa: F841  (kept alive by the loop)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
