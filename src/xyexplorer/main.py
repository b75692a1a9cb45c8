"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Locates the simulation engine and builds the SimulationSession (Model).
2. Builds the SimulationRunner that schedules frames (Controller).
3. Instantiates the Main Window (View) and passes the runner into it.
4. Prevents circular import errors by being the orchestrator.
"""
import logging
import sys

import pyqtgraph as pg
from PySide6.QtWidgets import QApplication, QMessageBox

from xyexplorer import config
from xyexplorer.controller.runner import SimulationRunner
from xyexplorer.logging_config import setup_logging
from xyexplorer.model.engine import load_engine_factory
from xyexplorer.model.errors import EngineLoadError
from xyexplorer.model.session import SimulationSession
from xyexplorer.view.main_window import MainWindow, VISIBLE_APP_NAME

logger = logging.getLogger(__name__)


def main() -> None:
    # 1. Setup Logging (Console + Optional File)
    setup_logging()

    # 2. Create the Qt Application
    app = QApplication(sys.argv)
    app.setApplicationName(VISIBLE_APP_NAME)
    # Images are indexed [row, col] like the spin array
    pg.setConfigOptions(imageAxisOrder='row-major', antialias=True)

    # 3. Locate the simulation engine
    try:
        engine_factory = load_engine_factory(config.ENGINE_FACTORY_PATH)
    except EngineLoadError as e:
        logger.error(str(e))
        QMessageBox.critical(
            None, "Simulation Engine Missing",
            f"{e}\n\nSet XYEXPLORER_ENGINE to 'module:attribute' of an installed engine."
        )
        sys.exit(1)

    # 4. Initialize the Data Model and the frame scheduler
    session = SimulationSession(engine_factory)
    session.construct()
    runner = SimulationRunner(session)

    # 5. Initialize the Main Window, passing the runner
    window = MainWindow(runner)
    window.show()

    # 6. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
