"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the data model (ViewerState) and the log sink (LogBook).
2. Instantiates the Main Window (View) and passes both into it.
3. Prevents circular import errors by being the orchestrator.

File paths given on the command line are opened at startup.
"""
import logging
import sys

from PySide6.QtWidgets import QApplication

from spatialview.logging_config import setup_logging
from spatialview.model.log import LogBook
from spatialview.model.state import ViewerState
from spatialview.view.main_window import MainWindow, VISIBLE_APP_NAME


def main() -> None:
    # 1. Setup Logging (Console + Optional File)
    # Use logging.DEBUG to see everything during development
    setup_logging(level=logging.INFO)

    # 2. Create the Qt Application
    app = QApplication(sys.argv)
    app.setApplicationName(VISIBLE_APP_NAME)

    # 3. Initialize the Data Model
    state = ViewerState()
    log_book = LogBook()

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(state, log_book)
    window.show()

    paths = app.arguments()[1:]
    if paths:
        window.add_files(paths)

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
