from PyQt6.QtCore import QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QFrame, QScrollArea, QVBoxLayout, QWidget
from weekwidget.core.config import (
    ALL_DAY_ROW_HEIGHT, BACKGROUND_COLOR, DAY_HEADER_HEIGHT, DEFAULT_EVENT_COLOR,
    FONT_LABEL, FONT_LABEL_SIZE, FONT_SMALL, FONT_SMALL_SIZE, GRID_LINE_COLOR,
    HIGHLIGHT_COLOR, HOUR_HEIGHT, MUTED_TEXT_COLOR, NOW_LINE_COLOR, TEXT_COLOR,
    TIME_GUTTER_WIDTH, TODAY_BG_COLOR
)
from weekwidget.core.utils import format_time

BLOCK_TEXT_FLAGS = (Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft).value | Qt.TextFlag.TextWordWrap.value


def _event_color(event):
    color = QColor(event.color or DEFAULT_EVENT_COLOR)
    return color if color.isValid() else QColor(DEFAULT_EVENT_COLOR)


class _WeekCanvas(QWidget):
    """Base for the painted parts of the week; handles column geometry and event hits."""
    eventClicked = pyqtSignal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.week_layout = None
        self.hit_rects = []

    def set_week_layout(self, week_layout):
        self.week_layout = week_layout
        self.update()

    def column_width(self):
        return max(self.width() - TIME_GUTTER_WIDTH, 7) / 7

    def day_x(self, index):
        return TIME_GUTTER_WIDTH + index * self.column_width()

    def mousePressEvent(self, event):
        """Open the event under the cursor; let other clicks fall through to the window."""
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            for rect, calendar_event in reversed(self.hit_rects):
                if rect.contains(pos):
                    self.eventClicked.emit(calendar_event)
                    event.accept()
                    return
        event.ignore()


class DayHeader(_WeekCanvas):
    """Day names, ISO week number and the all-day events row."""

    def set_week_layout(self, week_layout):
        rows = max(week_layout.all_day_rows, 1)
        self.setFixedHeight(DAY_HEADER_HEIGHT + rows * ALL_DAY_ROW_HEIGHT + 4)
        super().set_week_layout(week_layout)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(BACKGROUND_COLOR))
        self.hit_rects = []
        if self.week_layout is None:
            return

        col_w = self.column_width()
        painter.setFont(QFont(FONT_SMALL, FONT_SMALL_SIZE))
        painter.setPen(QColor(MUTED_TEXT_COLOR))
        painter.drawText(QRectF(0, 0, TIME_GUTTER_WIDTH, DAY_HEADER_HEIGHT),
                         Qt.AlignmentFlag.AlignCenter, f"W{self.week_layout.week_number}")

        for index, day in enumerate(self.week_layout.days):
            x = self.day_x(index)
            label_rect = QRectF(x, 0, col_w, DAY_HEADER_HEIGHT)
            if day.is_today:
                painter.fillRect(QRectF(x, 0, col_w, self.height()), QColor(TODAY_BG_COLOR))
            font = QFont(FONT_LABEL, FONT_LABEL_SIZE)
            font.setBold(day.is_today)
            painter.setFont(font)
            painter.setPen(QColor(HIGHLIGHT_COLOR).lighter(150) if day.is_today else QColor(TEXT_COLOR))
            painter.drawText(label_rect, Qt.AlignmentFlag.AlignCenter, day.label)

            painter.setFont(QFont(FONT_SMALL, FONT_SMALL_SIZE))
            for row, calendar_event in enumerate(day.all_day):
                rect = QRectF(x + 2, DAY_HEADER_HEIGHT + row * ALL_DAY_ROW_HEIGHT + 1,
                              col_w - 4, ALL_DAY_ROW_HEIGHT - 2)
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(_event_color(calendar_event))
                painter.drawRoundedRect(rect, 3, 3)
                painter.setPen(QColor("white"))
                painter.drawText(rect.adjusted(4, 0, -2, 0),
                                 Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft,
                                 calendar_event.title)
                self.hit_rects.append((rect, calendar_event))

        painter.setPen(QPen(QColor(GRID_LINE_COLOR), 1))
        painter.drawLine(0, self.height() - 1, self.width(), self.height() - 1)


class TimeGrid(_WeekCanvas):
    """The 24-hour grid with timed events and the current-time line."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFixedHeight(24 * HOUR_HEIGHT)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(BACKGROUND_COLOR))
        self.hit_rects = []
        if self.week_layout is None:
            return

        col_w = self.column_width()
        grid_h = self.height()

        for index, day in enumerate(self.week_layout.days):
            if day.is_today:
                painter.fillRect(QRectF(self.day_x(index), 0, col_w, grid_h), QColor(TODAY_BG_COLOR))

        painter.setFont(QFont(FONT_SMALL, FONT_SMALL_SIZE))
        for hour in range(24):
            y = hour * HOUR_HEIGHT
            painter.setPen(QPen(QColor(GRID_LINE_COLOR), 1))
            painter.drawLine(TIME_GUTTER_WIDTH, y, self.width(), y)
            if hour:
                painter.setPen(QColor(MUTED_TEXT_COLOR))
                painter.drawText(QRectF(0, y - 8, TIME_GUTTER_WIDTH - 6, 16),
                                 Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
                                 f"{hour:02d}:00")
        painter.setPen(QPen(QColor(GRID_LINE_COLOR), 1))
        for index in range(8):
            x = int(self.day_x(index))
            painter.drawLine(x, 0, x, grid_h)

        for block in self.week_layout.blocks:
            lane_w = col_w / block.columns
            rect = QRectF(self.day_x(block.day_index) + block.column * lane_w + 1,
                          block.top * grid_h + 1,
                          lane_w - 2,
                          block.height * grid_h - 2)
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(_event_color(block.event))
            painter.drawRoundedRect(rect, 4, 4)

            painter.setPen(QColor("white"))
            text = block.event.title
            if rect.height() >= 2 * ALL_DAY_ROW_HEIGHT and not block.continues_before:
                text = f"{text}\n{format_time(block.event.start.astimezone())}"
            painter.drawText(rect.adjusted(4, 2, -2, -2),
                             BLOCK_TEXT_FLAGS,
                             text)
            self.hit_rects.append((rect, block.event))

        marker = self.week_layout.now
        if marker is not None:
            x = self.day_x(marker.day_index)
            y = marker.position * grid_h
            painter.setPen(QPen(QColor(NOW_LINE_COLOR), 2))
            painter.drawLine(int(x), int(y), int(x + col_w), int(y))
            painter.setBrush(QColor(NOW_LINE_COLOR))
            painter.setPen(Qt.PenStyle.NoPen)
            painter.drawEllipse(QRectF(x - 4, y - 4, 8, 8))


class WeekView(QFrame):
    """Day header above a scrollable time grid, both fed from one WeekLayout."""
    eventClicked = pyqtSignal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.header = DayHeader()
        self.header.eventClicked.connect(self.eventClicked)
        layout.addWidget(self.header)

        self.grid = TimeGrid()
        self.grid.eventClicked.connect(self.eventClicked)
        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.scroll.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.scroll.setWidget(self.grid)
        layout.addWidget(self.scroll, 1)

    def set_week_layout(self, week_layout):
        self.header.set_week_layout(week_layout)
        self.grid.set_week_layout(week_layout)

    def scroll_to_hour(self, hour):
        """Scroll so `hour` sits near the top of the visible grid."""
        self.scroll.verticalScrollBar().setValue(max(hour - 1, 0) * HOUR_HEIGHT)
