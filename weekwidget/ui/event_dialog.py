from PyQt6.QtCore import Qt, QUrl
from PyQt6.QtGui import QDesktopServices, QFont
from PyQt6.QtWidgets import QDialog, QHBoxLayout, QLabel, QPushButton, QTextBrowser, QVBoxLayout
from weekwidget.core.config import (
    DEFAULT_DIALOG_HEIGHT, DEFAULT_DIALOG_WIDTH, DROPDOWN_BG_COLOR, FONT_HEADER, FONT_HEADER_SIZE,
    FONT_LABEL, FONT_LABEL_SIZE, MAIN_STYLE, MUTED_TEXT_COLOR, TEXT_COLOR
)
from weekwidget.core.utils import format_date_long, format_time_range


class EventDialog(QDialog):
    """Read-only details of a calendar event."""
    def __init__(self, event, parent=None):
        super().__init__(parent)
        self.event = event

        self.setWindowTitle(event.title)
        self.setStyleSheet(MAIN_STYLE)
        self.setFixedSize(DEFAULT_DIALOG_WIDTH, DEFAULT_DIALOG_HEIGHT)

        if parent:
            parent_rect = parent.geometry()
            x = parent_rect.x() + (parent_rect.width() - DEFAULT_DIALOG_WIDTH) // 2
            y = parent_rect.y() + (parent_rect.height() - DEFAULT_DIALOG_HEIGHT) // 2
            self.setGeometry(x, y, DEFAULT_DIALOG_WIDTH, DEFAULT_DIALOG_HEIGHT)

        self.init_ui()

    def init_ui(self):
        """Create and arrange all dialog widgets."""
        main_layout = QVBoxLayout(self)
        main_layout.setSpacing(8)

        title_label = QLabel(self.event.title)
        title_font = QFont(FONT_HEADER, FONT_HEADER_SIZE)
        title_font.setBold(True)
        title_label.setFont(title_font)
        title_label.setWordWrap(True)
        title_label.setStyleSheet(f"border-left: 4px solid {self.event.color}; padding-left: 6px;")
        main_layout.addWidget(title_label)

        start_day = self.event.start if self.event.all_day else self.event.start.astimezone().date()
        for text in (format_date_long(start_day), format_time_range(self.event),
                     self.event.calendar_name, self.event.location):
            if text:
                label = QLabel(text)
                label.setFont(QFont(FONT_LABEL, FONT_LABEL_SIZE))
                label.setWordWrap(True)
                label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
                main_layout.addWidget(label)

        if self.event.description:
            description = QTextBrowser()
            description.setOpenExternalLinks(True)
            description.setHtml(self.event.description)
            description.setStyleSheet(
                f"background-color: {DROPDOWN_BG_COLOR}; color: {TEXT_COLOR}; border: none;")
            main_layout.addWidget(description, 1)
        else:
            empty = QLabel("No description")
            empty.setStyleSheet(f"color: {MUTED_TEXT_COLOR};")
            main_layout.addWidget(empty)
            main_layout.addStretch(1)

        button_layout = QHBoxLayout()
        if self.event.html_link:
            open_button = QPushButton("Open in Google Calendar")
            open_button.clicked.connect(self.open_in_browser)
            button_layout.addWidget(open_button)
        button_layout.addStretch(1)
        close_button = QPushButton("Close")
        close_button.clicked.connect(self.accept)
        button_layout.addWidget(close_button)
        main_layout.addLayout(button_layout)

    def open_in_browser(self):
        QDesktopServices.openUrl(QUrl(self.event.html_link))
