# UI modules initialization
from weekwidget.ui.event_dialog import EventDialog
from weekwidget.ui.tasks_panel import TasksPanel
from weekwidget.ui.week_view import WeekView
from weekwidget.ui.widget_window import WidgetWindow

__all__ = ['EventDialog', 'TasksPanel', 'WeekView', 'WidgetWindow']
