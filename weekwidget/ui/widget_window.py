import logging
from datetime import date, datetime
from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QFont, QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QApplication, QFrame, QHBoxLayout, QLabel, QMainWindow, QPushButton, QVBoxLayout, QWidget
)
from weekwidget.core.config import (
    BANNER_COLOR, CLOCK_TICK_MS, DEFAULT_WINDOW_SIZE, FONT_HEADER, FONT_HEADER_SIZE, FONT_SMALL,
    FONT_SMALL_SIZE, MAIN_STYLE, MUTED_TEXT_COLOR, NAV_BG_COLOR, PADDING, REFRESH_INTERVAL_MS
)
from weekwidget.core.errors import AuthError, NetworkError, RateLimitError
from weekwidget.core.layout import layout_week
from weekwidget.core.week import WeekWindow
from weekwidget.ui.event_dialog import EventDialog
from weekwidget.ui.tasks_panel import TasksPanel
from weekwidget.ui.week_view import WeekView
from weekwidget.workers.api_worker import APIWorker

logger = logging.getLogger(__name__)


class WidgetWindow(QMainWindow):
    """Frameless week-view window."""
    def __init__(self, sync_manager, task_manager):
        super().__init__()
        self.sync = sync_manager
        self.task_manager = task_manager

        self.setWindowTitle("Week")
        self.setWindowFlags(Qt.WindowType.FramelessWindowHint | Qt.WindowType.Tool)
        self.resize(*DEFAULT_WINDOW_SIZE)
        self.setStyleSheet(MAIN_STYLE)

        self.week = WeekWindow.containing(date.today())
        self.drag_offset = None
        self.loading = False
        self.last_error = None

        self.init_ui()
        self.init_shortcuts()

        self.worker = APIWorker(self)
        self.worker.jobCompleted.connect(self.on_job_completed)
        self.worker.jobFailed.connect(self.on_job_failed)
        self.worker.loadingChanged.connect(self.on_loading_changed)

        self.refresh_timer = QTimer(self)
        self.refresh_timer.timeout.connect(self.request_refresh)
        self.refresh_timer.start(REFRESH_INTERVAL_MS)

        self.clock_timer = QTimer(self)
        self.clock_timer.timeout.connect(self.on_clock_tick)
        self.clock_timer.start(CLOCK_TICK_MS)

        self.sync.load_cached()
        self.redraw()
        QTimer.singleShot(0, self.scroll_to_now)
        self.request_refresh()

    def init_ui(self):
        """Initialize the main UI components."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        self.init_navbar(main_layout)
        self.init_banner(main_layout)

        body = QHBoxLayout()
        body.setContentsMargins(0, 0, 0, 0)
        body.setSpacing(0)

        self.week_view = WeekView()
        self.week_view.eventClicked.connect(self.show_event)
        body.addWidget(self.week_view, 1)

        self.tasks_panel = TasksPanel()
        self.tasks_panel.taskCompletionRequested.connect(self.complete_task)
        body.addWidget(self.tasks_panel)

        main_layout.addLayout(body, 1)

    def init_navbar(self, parent_layout):
        """Header bar; it doubles as the drag handle of the frameless window."""
        navbar = QFrame()
        navbar.setStyleSheet(f"background-color: {NAV_BG_COLOR};")
        navbar.setFixedHeight(44)

        nav_layout = QHBoxLayout(navbar)
        nav_layout.setContentsMargins(PADDING, 4, PADDING, 4)

        self.title_label = QLabel()
        self.title_label.setFont(QFont(FONT_HEADER, FONT_HEADER_SIZE, QFont.Weight.Bold))
        nav_layout.addWidget(self.title_label)
        nav_layout.addStretch(1)

        self.status_label = QLabel()
        self.status_label.setFont(QFont(FONT_SMALL, FONT_SMALL_SIZE))
        self.status_label.setStyleSheet(f"color: {MUTED_TEXT_COLOR};")
        nav_layout.addWidget(self.status_label)

        self.prev_button = self._nav_button("‹", "Previous week (←)", self.previous_week)
        self.today_button = self._nav_button("Today", "Current week (Home)", self.current_week)
        self.next_button = self._nav_button("›", "Next week (→)", self.next_week)
        self.refresh_button = self._nav_button("⟳", "Refresh (F5)", self.request_refresh)
        close_button = self._nav_button("✕", "Close (Esc)", self.exit_widget)
        for button in (self.prev_button, self.today_button, self.next_button,
                       self.refresh_button, close_button):
            nav_layout.addWidget(button)

        parent_layout.addWidget(navbar)

    def _nav_button(self, text, tooltip, slot):
        button = QPushButton(text)
        button.setToolTip(tooltip)
        button.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        button.clicked.connect(slot)
        return button

    def init_banner(self, parent_layout):
        """Non-fatal error banner with a retry button."""
        self.banner = QFrame()
        self.banner.setStyleSheet(f"background-color: {BANNER_COLOR};")
        banner_layout = QHBoxLayout(self.banner)
        banner_layout.setContentsMargins(PADDING, 4, PADDING, 4)

        self.banner_label = QLabel()
        self.banner_label.setWordWrap(True)
        banner_layout.addWidget(self.banner_label, 1)

        retry_button = self._nav_button("Retry", "Try again now", self.request_refresh)
        banner_layout.addWidget(retry_button)
        dismiss_button = self._nav_button("✕", "Dismiss", self.hide_banner)
        banner_layout.addWidget(dismiss_button)

        self.banner.hide()
        parent_layout.addWidget(self.banner)

    def init_shortcuts(self):
        bindings = (
            ("Left", self.previous_week),
            ("Right", self.next_week),
            ("Home", self.current_week),
            ("T", self.current_week),
            ("F5", self.request_refresh),
            ("R", self.request_refresh),
            ("Escape", self.exit_widget),
            ("Ctrl+Q", self.exit_widget),
        )
        self.shortcuts = []
        for keys, slot in bindings:
            shortcut = QShortcut(QKeySequence(keys), self)
            shortcut.activated.connect(slot)
            self.shortcuts.append(shortcut)

    # Rendering

    def redraw(self):
        """Lay out the visible week from the current dataset and repaint."""
        week_layout = layout_week(self.week, self.sync.events(), self.sync.tasks(),
                                  datetime.now().astimezone())
        self.title_label.setText(week_layout.title)
        self.week_view.set_week_layout(week_layout)
        self.tasks_panel.set_rows(week_layout.tasks)
        self.prev_button.setEnabled(self.week.has_previous())
        self.next_button.setEnabled(self.week.has_next())
        self.update_status()

    def update_status(self):
        if self.loading:
            text = "Updating…"
        elif self.sync.dataset is None:
            text = "No data yet"
        elif not self.sync.is_live or self.last_error is not None:
            fetched = self.sync.dataset.fetched_at.astimezone().strftime('%d %b %H:%M')
            text = f"Cached · {fetched}"
        else:
            text = ""
        self.status_label.setText(text)

    def on_clock_tick(self):
        today_week = WeekWindow.containing(date.today())
        self.redraw()
        if today_week == self.week and not self.sync.covers(self.week):
            self.request_refresh()

    def scroll_to_now(self):
        self.week_view.scroll_to_hour(datetime.now().hour)

    def show_banner(self, message):
        self.banner_label.setText(message)
        self.banner.show()

    def hide_banner(self):
        self.banner.hide()

    # Navigation

    def go_to_week(self, week):
        if week == self.week:
            return
        self.week = week
        self.redraw()
        if not self.sync.covers(week):
            self.request_refresh()

    def previous_week(self):
        self.go_to_week(self.week.previous())

    def next_week(self):
        self.go_to_week(self.week.next())

    def current_week(self):
        self.go_to_week(WeekWindow.containing(date.today()))
        self.scroll_to_now()

    # Data

    def request_refresh(self):
        """Fetch fresh data for the visible week unless a refresh is already running."""
        if not self.sync.begin_refresh(self.week):
            logger.debug("Refresh already in flight, queued week %s", self.week.start)
            return
        self.worker.add_job("refresh", self.sync.fetch, context=self.week, window=self.week)

    def complete_task(self, task_id):
        task = self.sync.mark_task_completed(task_id)
        if task is None:
            return
        self.redraw()
        self.worker.add_job(
            "complete_task",
            self.task_manager.complete_task,
            context=task,
            tasklist_id=task.tasklist_id,
            task_id=task.task_id,
        )

    def show_event(self, event):
        EventDialog(event, self).exec()

    def on_job_completed(self, result, job_type, context):
        """Handle completed jobs from the worker thread."""
        if job_type == "refresh":
            self.sync.apply(result)
            self.last_error = None
            self.hide_banner()
            queued = self.sync.finish_refresh()
            self.redraw()
            if queued is not None and not self.sync.covers(self.week):
                self.request_refresh()

        elif job_type == "complete_task":
            self.sync.confirm_task_completed(context.task_id)

    def on_job_failed(self, error, job_type, context):
        """Handle errors from the worker thread. None of them are fatal."""
        if job_type == "refresh":
            queued = self.sync.finish_refresh()
            self.last_error = error
            if isinstance(error, AuthError):
                self.show_banner(f"Sign-in needed: {error}. Retry to sign in again.")
            elif isinstance(error, NetworkError):
                self.show_banner("Google could not be reached. Showing cached data.")
            elif isinstance(error, RateLimitError):
                self.show_banner("Google is rate limiting requests. Showing cached data.")
            else:
                self.show_banner(f"Could not refresh: {error}. Showing cached data.")
            self.redraw()
            if queued is not None and queued != context and not self.sync.covers(self.week):
                self.request_refresh()

        elif job_type == "complete_task":
            self.sync.revert_task_completion(context.task_id)
            self.show_banner(f"Could not complete \"{context.title}\": {error}")
            self.redraw()

    def on_loading_changed(self, is_loading):
        self.loading = is_loading
        self.refresh_button.setEnabled(not is_loading)
        self.update_status()

    # Window behaviour

    def mousePressEvent(self, event):
        """Begin moving the frameless window."""
        if event.button() == Qt.MouseButton.LeftButton:
            self.drag_offset = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
            event.accept()

    def mouseMoveEvent(self, event):
        if self.drag_offset is not None and event.buttons() & Qt.MouseButton.LeftButton:
            self.move(event.globalPosition().toPoint() - self.drag_offset)
            event.accept()

    def mouseReleaseEvent(self, event):
        self.drag_offset = None

    def exit_widget(self):
        self.close()
        QApplication.instance().quit()

    def closeEvent(self, event):
        """Stop timers and the worker before closing."""
        self.refresh_timer.stop()
        self.clock_timer.stop()
        self.worker.stop()
        event.accept()
