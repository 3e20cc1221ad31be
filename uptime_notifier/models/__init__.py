"""数据模型模块"""

from .status import (
    HealthState, SignalKind, Endpoint, BadgePair, StructuredRecord, RawSignal,
    CheckMetrics, HistoryRecord, TransitionDescriptor, MessageKind,
    NotificationMessage, SummaryReport, CheckOutcome, utc_now, to_utc_isoformat
)

__all__ = [
    'HealthState', 'SignalKind', 'Endpoint', 'BadgePair', 'StructuredRecord',
    'RawSignal', 'CheckMetrics', 'HistoryRecord', 'TransitionDescriptor',
    'MessageKind', 'NotificationMessage', 'SummaryReport', 'CheckOutcome',
    'utc_now', 'to_utc_isoformat'
]
