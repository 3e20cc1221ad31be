"""工具模块"""

from .exceptions import NotifierError, ConfigError, StatusSourceError, AlertError
from .log_manager import LogManager, LogLevel, get_logger, log_manager

__all__ = [
    'NotifierError', 'ConfigError', 'StatusSourceError', 'AlertError',
    'LogManager', 'LogLevel', 'get_logger', 'log_manager'
]
