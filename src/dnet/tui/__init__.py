"""dnet-tui: window composition and event loop for the dnet terminal client."""

# Application assembly
from dnet.tui.app import Application, ExitCode, WindowSpec

# Background results
from dnet.tui.channel import Mailbox

# Settings
from dnet.tui.config import Settings, load_settings, save_settings

# Errors
from dnet.tui.errors import (
    BackendUnavailable,
    ConfigError,
    ConfigurationFault,
    InvalidTransition,
    TransientInputError,
    TuiError,
)

# Keyboard input
from dnet.tui.keys import InputEvent, KeyEvent, ResizeEvent, matches_key, parse_key

# Layout
from dnet.tui.layout import Frame, Region, Split, panel

# Event loop
from dnet.tui.scheduler import DEFAULT_TICK_INTERVAL_MS, Scheduler, SchedulerState

# Application state
from dnet.tui.state import AppState, WindowContext

# Terminal backends
from dnet.tui.terminal import InputSource, ProcessTerminal, RenderBackend

# Utilities
from dnet.tui.utils import sliding_text, truncate_to_width, visible_width

# View state machines
from dnet.tui.view import ViewTable

# Window contract
from dnet.tui.window import Dispatcher, FocusChange, Quit, Request, Window, WindowState

__all__ = [
    # App
    "Application",
    "ExitCode",
    "WindowSpec",
    # Channel
    "Mailbox",
    # Config
    "Settings",
    "load_settings",
    "save_settings",
    # Errors
    "BackendUnavailable",
    "ConfigError",
    "ConfigurationFault",
    "InvalidTransition",
    "TransientInputError",
    "TuiError",
    # Keys
    "InputEvent",
    "KeyEvent",
    "ResizeEvent",
    "matches_key",
    "parse_key",
    # Layout
    "Frame",
    "Region",
    "Split",
    "panel",
    # Scheduler
    "DEFAULT_TICK_INTERVAL_MS",
    "Scheduler",
    "SchedulerState",
    # State
    "AppState",
    "WindowContext",
    # Terminal
    "InputSource",
    "ProcessTerminal",
    "RenderBackend",
    # Utils
    "sliding_text",
    "truncate_to_width",
    "visible_width",
    # Views
    "ViewTable",
    # Window
    "Dispatcher",
    "FocusChange",
    "Quit",
    "Request",
    "Window",
    "WindowState",
]
