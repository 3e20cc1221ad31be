"""状态分类器

将原始状态信号归类为 up / slow / down / unknown 之一。

判断优先级（命中即返回）:
    1. 信号中明确给出的 status 字段
    2. 结构化记录中的 HTTP 状态码
    3. 结构化记录中的响应时间数值
    4. 徽章颜色与运行时间百分比
    5. 默认为 up
"""

from typing import Optional

from ..models.status import (
    BadgePair, HealthState, RawSignal, SignalKind, StructuredRecord
)
from ..readers.base import parse_uptime
from ..utils.log_manager import get_logger

SLOW_RESPONSE_THRESHOLD_MS = 10000
HIGH_UPTIME_THRESHOLD = 95.0

RED = 'red'
SLOW_COLORS = ('orange', 'yellow')

# Upptime 历史记录中的状态别名
STATUS_ALIASES = {
    'degraded': HealthState.SLOW,
}

logger = get_logger('classifier')


def _explicit_state(status: Optional[str]) -> Optional[HealthState]:
    if not status:
        return None
    normalized = str(status).strip().lower()
    if normalized in STATUS_ALIASES:
        return STATUS_ALIASES[normalized]
    state = HealthState.parse(normalized)
    if state is HealthState.UNKNOWN and normalized != 'unknown':
        logger.warning(f"无法识别的状态值: {status}，按 unknown 处理")
    return state


def classify_record(record: StructuredRecord) -> HealthState:
    """根据结构化记录判断状态"""
    explicit = _explicit_state(record.status)
    if explicit is not None:
        return explicit

    if record.code is not None:
        if 200 <= record.code < 300:
            return HealthState.UP
        if record.code >= 400:
            return HealthState.DOWN

    if record.response_time_ms is not None:
        if record.response_time_ms > SLOW_RESPONSE_THRESHOLD_MS:
            return HealthState.SLOW
        if record.response_time_ms > 0:
            return HealthState.UP

    return HealthState.UP


def classify_badges(badges: BadgePair) -> HealthState:
    """根据响应时间徽章和运行时间徽章判断状态"""
    explicit = _explicit_state(badges.explicit_status)
    if explicit is not None:
        return explicit

    response_color = (badges.response_time_color or '').lower()
    uptime_color = (badges.uptime_color or '').lower()
    uptime_value = parse_uptime(badges.uptime_message)

    # 运行时间显示红色直接判定为异常
    if uptime_color == RED:
        return HealthState.DOWN

    # 运行时间很高时，响应时间变红只算缓慢
    if uptime_value is not None and uptime_value > HIGH_UPTIME_THRESHOLD:
        if response_color == RED:
            return HealthState.SLOW
        return HealthState.UP

    if response_color == RED:
        return HealthState.DOWN

    if response_color in SLOW_COLORS:
        return HealthState.SLOW

    return HealthState.UP


def classify(signal: RawSignal) -> HealthState:
    """
    将原始信号归类为健康状态

    Args:
        signal: 徽章信号或结构化记录

    Returns:
        HealthState: 分类结果，同一信号多次调用结果相同
    """
    kind = getattr(signal, 'kind', None)
    if kind == SignalKind.RECORD:
        return classify_record(signal)
    if kind == SignalKind.BADGE:
        return classify_badges(signal)
    raise TypeError(f"不支持的信号类型: {type(signal).__name__}")
