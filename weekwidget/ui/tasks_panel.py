from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import QCheckBox, QFrame, QHBoxLayout, QLabel, QScrollArea, QVBoxLayout, QWidget
from weekwidget.core.config import (
    FONT_HEADER, FONT_HEADER_SIZE, FONT_LABEL, FONT_LABEL_SIZE, FONT_SMALL, FONT_SMALL_SIZE,
    MUTED_TEXT_COLOR, NAV_BG_COLOR, OVERDUE_COLOR, PADDING, TASKLIST_TITLE, TASKS_PANEL_WIDTH
)


class TasksPanel(QFrame):
    """Side panel listing the tasks; ticking a box asks for the task to be completed."""
    taskCompletionRequested = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFixedWidth(TASKS_PANEL_WIDTH)
        self.setStyleSheet(f"background-color: {NAV_BG_COLOR};")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(PADDING, PADDING, PADDING, PADDING)
        layout.setSpacing(PADDING // 2)

        title = QLabel(TASKLIST_TITLE)
        title.setFont(QFont(FONT_HEADER, FONT_HEADER_SIZE, QFont.Weight.Bold))
        layout.addWidget(title)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.content = QWidget()
        self.rows_layout = QVBoxLayout(self.content)
        self.rows_layout.setContentsMargins(0, 0, 0, 0)
        self.rows_layout.setSpacing(PADDING // 2)
        self.rows_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        self.scroll.setWidget(self.content)
        layout.addWidget(self.scroll, 1)

    def set_rows(self, rows):
        """Rebuild the list from the layout's task rows."""
        self.clear_rows()

        if not rows:
            empty = QLabel("No open tasks")
            empty.setStyleSheet(f"color: {MUTED_TEXT_COLOR};")
            self.rows_layout.addWidget(empty)
            return

        for row in rows:
            self.rows_layout.addWidget(self.create_task_row(row))

    def create_task_row(self, row):
        task = row.task
        container = QWidget()
        row_layout = QHBoxLayout(container)
        row_layout.setContentsMargins(0, 0, 0, 0)

        checkbox = QCheckBox(task.title)
        font = QFont(FONT_LABEL, FONT_LABEL_SIZE)
        font.setStrikeOut(task.completed)
        checkbox.setFont(font)
        checkbox.setChecked(task.completed)
        checkbox.setEnabled(not task.completed)
        if task.notes:
            checkbox.setToolTip(task.notes)
        checkbox.toggled.connect(
            lambda checked, task_id=task.task_id: self.on_task_toggled(task_id, checked))
        row_layout.addWidget(checkbox, 1)

        if row.due_label:
            due = QLabel(row.due_label)
            due.setFont(QFont(FONT_SMALL, FONT_SMALL_SIZE))
            due.setStyleSheet(f"color: {OVERDUE_COLOR if row.overdue else MUTED_TEXT_COLOR};")
            row_layout.addWidget(due)

        return container

    def on_task_toggled(self, task_id, checked):
        if checked:
            self.taskCompletionRequested.emit(task_id)

    def clear_rows(self):
        while self.rows_layout.count():
            item = self.rows_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
