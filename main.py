import logging
import sys
from PyQt6.QtWidgets import QApplication
from weekwidget.api.auth import AuthManager
from weekwidget.api.cache import CacheManager
from weekwidget.api.calendar import CalendarManager
from weekwidget.api.sync import SyncManager
from weekwidget.api.tasks import TaskManager
from weekwidget.core.config import LOG_LEVEL
from weekwidget.ui.widget_window import WidgetWindow

def main():
    """Main entry point for the widget."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize services; sign-in and fetching happen on the worker thread
    auth_manager = AuthManager()
    calendar_manager = CalendarManager(auth_manager)
    task_manager = TaskManager(auth_manager)
    sync_manager = SyncManager(calendar_manager, task_manager, CacheManager())

    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    window = WidgetWindow(sync_manager, task_manager)
    window.show()

    sys.exit(app.exec())

if __name__ == "__main__":
    main()
