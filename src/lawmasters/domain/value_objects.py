from enum import Enum

MAX_NOTIFICATIONS = 50
MAX_RECENT_MATTERS = 10

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_DATE_FORMAT = "dd/MM/yyyy"


class Language(str, Enum):
    ENGLISH = "en"
    HINDI = "hi"


class NotificationKind(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
