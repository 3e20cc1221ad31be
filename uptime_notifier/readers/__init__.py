"""状态读取器模块"""

from .base import BaseStatusReader, metrics_from_signal, parse_response_time, parse_uptime
from .factory import StatusReaderFactory, status_reader_factory, register_reader, read_signal
from .badge_reader import BadgeStatusReader
from .record_reader import RecordStatusReader

__all__ = ['BaseStatusReader', 'StatusReaderFactory', 'status_reader_factory',
           'register_reader', 'read_signal', 'metrics_from_signal',
           'parse_response_time', 'parse_uptime',
           'BadgeStatusReader', 'RecordStatusReader']
