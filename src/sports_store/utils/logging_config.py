"""
Centralized logging configuration for Sports Store.
Provides component-specific loggers with separate log files.

Each initialization opens a session directory below the configured log
directory. Diagnostics emitted at DEBUG level (multi-match lookups, rollback
failures, failed writes) only reach the files in debug mode. Outside debug
mode the configured log level is the lowest level any component logs at.
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Dict, Any, List

from ..config import SportsStoreConfig, get_config


DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s'
SIMPLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

COMPONENT_MAX_BYTES = 10 * 1024 * 1024
UNIFIED_MAX_BYTES = 20 * 1024 * 1024


@dataclass
class LogContent:
    """Content of one log file, keyed by its creation date."""

    creation_date: date
    content: str


def _configured_level(name: str) -> int:
    """Map a configured level name to a logging level, INFO if unknown."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _file_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


class ComponentLogger:
    """Manages component-specific logging with separate files."""

    _loggers: Dict[str, logging.Logger] = {}
    _initialized = False
    _log_dir: Optional[Path] = None
    _log_to_file = True
    _debug = False
    _base_level = logging.INFO
    _unified_handler: Optional[logging.Handler] = None

    # Component name -> (lowest level outside debug mode, log file)
    COMPONENTS = {
        'repository': (logging.INFO, 'repository.log'),
        'cascade': (logging.INFO, 'cascade.log'),
        'rollback': (logging.INFO, 'rollback.log'),
        'database': (logging.INFO, 'database.log'),
        'main': (logging.INFO, 'main.log'),
        'error': (logging.ERROR, 'errors.log'),
    }

    # Components that also report errors on stderr
    CONSOLE_COMPONENTS = ('main', 'error')

    @classmethod
    def _level_for(cls, default: int) -> int:
        if cls._debug:
            return logging.DEBUG
        return max(default, cls._base_level)

    @classmethod
    def _open_session_dir(cls, base_dir: Path, session: str, config: SportsStoreConfig) -> Path:
        session_dir = base_dir / session
        session_dir.mkdir(parents=True, exist_ok=True)
        with open(session_dir / "session_info.txt", 'w', encoding='utf-8') as f:
            f.write(f"Session started: {datetime.now().isoformat()}\n")
            f.write(f"Debug mode: {cls._debug}\n")
            f.write(f"Database: {config.database_url}\n")
        return session_dir

    @classmethod
    def _build_logger(cls, component: str, level: int, filename: str) -> logging.Logger:
        logger = logging.getLogger(f"sports_store.{component}")
        logger.handlers.clear()
        logger.propagate = False
        logger.setLevel(level)

        if cls._log_to_file:
            logger.addHandler(_file_handler(cls._log_dir / filename, level, COMPONENT_MAX_BYTES, 5))
            logger.addHandler(cls._unified_handler)

        if component in cls.CONSOLE_COMPONENTS:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.ERROR)
            console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT, datefmt='%H:%M:%S'))
            logger.addHandler(console_handler)
        elif not cls._log_to_file:
            logger.addHandler(logging.NullHandler())

        cls._loggers[component] = logger
        return logger

    @classmethod
    def initialize(cls, log_dir: Optional[str] = None, debug: Optional[bool] = None) -> None:
        """
        Initialize the logging system with component-specific loggers.

        Args:
            log_dir: Directory for log files. Defaults to the configured log directory
            debug: Enable debug logging for all components. Defaults to the configured debug mode
        """
        if cls._initialized:
            return

        config = get_config()
        cls._debug = config.app.debug_mode if debug is None else debug
        cls._log_to_file = config.app.log_to_file
        cls._base_level = _configured_level(config.app.log_level)

        session = datetime.now().strftime("%Y%m%d_%H%M%S")
        if cls._log_to_file:
            base_dir = Path(log_dir) if log_dir else config.log_directory
            cls._log_dir = cls._open_session_dir(base_dir, session, config)
            cls._unified_handler = _file_handler(
                cls._log_dir / 'unified.log',
                cls._level_for(logging.INFO),
                UNIFIED_MAX_BYTES,
                3,
            )

        for component, (level, filename) in cls.COMPONENTS.items():
            cls._build_logger(component, cls._level_for(level), filename)

        # Mark as initialized before logging to avoid recursion
        cls._initialized = True

        main_logger = cls._loggers['main']
        main_logger.info(f"Sports Store logging initialized (session {session}, debug {cls._debug})")
        if cls._log_dir is not None:
            main_logger.info(f"Log directory: {cls._log_dir}")

    @classmethod
    def get_logger(cls, component: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            component: Component name (repository, cascade, rollback, database, ...)
                      Can also be a module path like 'sports_store.repositories.cascade'

        Returns:
            Logger instance for the component
        """
        if not cls._initialized:
            cls.initialize()

        if component.startswith('sports_store.'):
            parts = component.split('.')
            if parts[-1] in ('cascade', 'rollback'):
                component = parts[-1]
            elif parts[1] == 'repositories':
                component = 'repository'
            elif parts[1] in ('db', 'store'):
                component = 'database'
            else:
                component = 'main'

        if component not in cls._loggers:
            # unknown components get their own file on demand
            cls._build_logger(component, cls._level_for(logging.INFO), f'{component}.log')

        return cls._loggers[component]

    @classmethod
    def log_exception(cls, component: str, exc: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an exception with context to both component and error logs.

        Args:
            component: Component where the exception occurred
            exc: The exception to log
            context: Additional context information
        """
        component_logger = cls.get_logger(component)
        error_logger = cls._loggers['error']

        context_str = ""
        if context:
            context_str = " | Context: " + ", ".join(f"{k}={v}" for k, v in context.items())

        component_logger.error(
            f"Exception in {component}: {type(exc).__name__}: {exc}{context_str}",
            exc_info=exc,
        )
        error_logger.error(f"[{component}] {type(exc).__name__}: {exc}{context_str}", exc_info=exc)

    @classmethod
    def get_log_directory(cls) -> Optional[Path]:
        """Get the current log directory path."""
        return cls._log_dir

    @classmethod
    def get_log_content(cls) -> List[LogContent]:
        """Read every log file of the current session.

        Returns an empty list if file logging is disabled. Files that cannot
        be read are skipped.
        """
        if not cls._initialized or not cls._log_to_file or cls._log_dir is None:
            return []

        contents = []
        for log_file in sorted(cls._log_dir.glob("*.log")):
            try:
                created = date.fromtimestamp(log_file.stat().st_ctime)
                contents.append(
                    LogContent(creation_date=created, content=log_file.read_text(encoding='utf-8'))
                )
            except (OSError, UnicodeDecodeError) as e:
                cls.get_logger('main').debug(f"Error while reading log file {log_file}: {e}")
        return contents

    @classmethod
    def shutdown(cls) -> None:
        """Close all handlers so the logging system can be initialized again."""
        closed = set()
        for logger in cls._loggers.values():
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                if id(handler) not in closed:
                    handler.close()
                    closed.add(id(handler))
        cls._loggers = {}
        cls._log_dir = None
        cls._unified_handler = None
        cls._initialized = False


# Convenience functions
def get_logger(component: str) -> logging.Logger:
    """Get a logger for a specific component."""
    return ComponentLogger.get_logger(component)


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a module using its __name__.
    This automatically maps module paths to appropriate components.

    Example:
        logger = get_module_logger(__name__)
    """
    return ComponentLogger.get_logger(module_name)


def initialize_logging(log_dir: Optional[str] = None, debug: Optional[bool] = None) -> None:
    """Initialize the logging system."""
    ComponentLogger.initialize(log_dir=log_dir, debug=debug)


def shutdown_logging() -> None:
    """Tear down the logging system."""
    ComponentLogger.shutdown()


def log_exception(component: str, exc: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log an exception with context."""
    ComponentLogger.log_exception(component, exc, context)


def get_log_directory() -> Optional[Path]:
    """Get the current log directory path."""
    return ComponentLogger.get_log_directory()


def get_log_content() -> List[LogContent]:
    """Get the content of all log files of the current session."""
    return ComponentLogger.get_log_content()
