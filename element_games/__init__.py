from .catalog import ElementCatalog, ElementRecord, Family, MatterState, load_catalog, load_elements
from .config import GameSettings, configure_logging
from .errors import CatalogError, ElementGamesError, InsufficientCatalogError, InvalidConfigError
from .progress import NullSink, ProgressSink, ProgressTracker
from .session import EndReason, GameSession, GameType, SessionSummary

__version__ = "0.1.0"
