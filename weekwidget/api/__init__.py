# API modules initialization
from weekwidget.api.auth import AuthManager
from weekwidget.api.cache import CacheManager
from weekwidget.api.calendar import CalendarManager
from weekwidget.api.sync import SyncManager
from weekwidget.api.tasks import TaskManager

__all__ = ['AuthManager', 'CacheManager', 'CalendarManager', 'SyncManager', 'TaskManager']
