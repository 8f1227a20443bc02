import datetime
import os

# Files
CONFIG_DIR = os.environ.get('WEEKWIDGET_CONFIG_DIR', 'config')
TOKEN_FILE = os.path.join(CONFIG_DIR, 'token.json')
CREDENTIALS_FILE = os.path.join(CONFIG_DIR, 'credentials.json')
CACHE_FILE = os.path.join(CONFIG_DIR, 'cache.json')
CACHE_VERSION = 1

LOG_LEVEL = os.environ.get('WEEKWIDGET_LOG_LEVEL', 'INFO')

# API Configuration
SCOPES = [
    'https://www.googleapis.com/auth/calendar.readonly',
    'https://www.googleapis.com/auth/tasks',
]
TOKEN_REFRESH_BUFFER = 300
API_MAX_RESULTS = 250
API_NUM_RETRIES = 3
TASKLIST_TITLE = 'My Tasks'
DEFAULT_TASKLIST_ID = '@default'
FETCH_DAYS = 60

# Range the widget will navigate and query within
MIN_DATE = datetime.date(1970, 1, 5)
MAX_DATE = datetime.date(2099, 12, 31)

# Timers
REFRESH_INTERVAL_MS = 5 * 60 * 1000
CLOCK_TICK_MS = 60 * 1000

# Color Theme
BACKGROUND_COLOR = "#1E1E2F"
NAV_BG_COLOR = "#2A2A3B"
DROPDOWN_BG_COLOR = "#252639"
GRID_LINE_COLOR = "#33344B"
CARD_COLOR = "#1F6AA5"
TEXT_COLOR = "#E0E0E0"
MUTED_TEXT_COLOR = "#8A8AA8"
HIGHLIGHT_COLOR = "#6060A0"
TODAY_BG_COLOR = "#26263A"
NOW_LINE_COLOR = "#E74C3C"
BANNER_COLOR = "#8E3B3B"
OVERDUE_COLOR = "#E67E22"
DEFAULT_EVENT_COLOR = "#3B82F6"

# Fonts
FONT_HEADER = "Segoe UI Semibold"
FONT_HEADER_SIZE = 14
FONT_LABEL = "Segoe UI"
FONT_LABEL_SIZE = 11
FONT_SMALL = "Segoe UI"
FONT_SMALL_SIZE = 9
PADDING = 10

# UI Constants
DEFAULT_WINDOW_SIZE = (1100, 680)
DEFAULT_DIALOG_WIDTH = 380
DEFAULT_DIALOG_HEIGHT = 320
TASKS_PANEL_WIDTH = 240
HOUR_HEIGHT = 44
TIME_GUTTER_WIDTH = 48
DAY_HEADER_HEIGHT = 40
ALL_DAY_ROW_HEIGHT = 20
MIN_EVENT_MINUTES = 20

# StyleSheets
MAIN_STYLE = f"""
QMainWindow, QDialog {{
    background-color: {BACKGROUND_COLOR};
    border: 1px solid {GRID_LINE_COLOR};
}}
QScrollArea {{
    background-color: {BACKGROUND_COLOR};
    border: none;
}}
QLabel {{
    color: {TEXT_COLOR};
}}
QPushButton {{
    background-color: {CARD_COLOR};
    color: white;
    border: none;
    border-radius: 4px;
    padding: 4px 10px;
    font-weight: bold;
}}
QPushButton:hover {{
    background-color: #2980b9;
}}
QPushButton:disabled {{
    background-color: {NAV_BG_COLOR};
    color: {MUTED_TEXT_COLOR};
}}
QCheckBox {{
    color: {TEXT_COLOR};
}}
QCheckBox:disabled {{
    color: {MUTED_TEXT_COLOR};
}}
"""
