"""Planbook core library: evening grid engine, stores and clients.

Public API re-exports for convenient imports:
    from planbook import Grid, SelectionEngine, EveningBoard, ...
"""

__version__ = "0.4.0"

# Workspace & paths
from planbook.workspace import (
    workspace_root,
    get_user_timezone,
    today_str,
    now_local,
    config_path,
    evening_path,
    daily_path,
    pomodoro_path,
)

# Configuration & logging
from planbook.config import Settings, load_settings, save_settings
from planbook.log import setup_logging

# Errors
from planbook.errors import (
    PlannerError,
    ValidationError,
    NotFoundError,
    NetworkError,
    ServerError,
    SaveInProgressError,
)

# Models
from planbook.models import (
    HOURS,
    DAYS,
    DAY_LABELS,
    CellKey,
    Activity,
    EveningPlanner,
    HistoryEntry,
    Snapshot,
    TimelineSlot,
    Todo,
    WaterCup,
    Meal,
    DailyPlanner,
    PomodoroSession,
    DashboardSummary,
)

# Evening grid engine
from planbook.grid import Grid
from planbook.selection import GestureState, SelectionEngine, cell_rect
from planbook.editing import EditSession, build_batch, prefill_for

# Clients
from planbook.gateway import PlannerGateway
from planbook.history import HistoryBrowser
from planbook.board import EveningBoard
