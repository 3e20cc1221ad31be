"""端点状态相关的数据模型"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


def utc_now() -> datetime:
    """返回带 UTC 时区的当前时间"""
    return datetime.now(timezone.utc)


def to_utc_isoformat(value: datetime) -> str:
    """转换为带时区偏移的 UTC ISO 8601 字符串，无时区的时间按本地时间处理"""
    return value.astimezone(timezone.utc).isoformat()


class HealthState(str, Enum):
    """端点健康状态"""
    UP = "up"
    SLOW = "slow"
    DOWN = "down"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> 'HealthState':
        """将任意取值转换为健康状态，无法识别时返回UNKNOWN"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class SignalKind(str, Enum):
    """原始状态信号类型"""
    BADGE = "badge"
    RECORD = "record"


@dataclass(frozen=True)
class Endpoint:
    """被监控的端点，名称同时作为历史记录的键"""
    name: str
    url: str
    data_path: str
    source: SignalKind = SignalKind.BADGE
    history_file: Optional[str] = None


@dataclass(frozen=True)
class BadgePair:
    """响应时间徽章和运行时间徽章组成的信号"""
    response_time_message: str
    response_time_color: str
    uptime_message: str
    uptime_color: str
    explicit_status: Optional[str] = None

    @property
    def kind(self) -> SignalKind:
        return SignalKind.BADGE


@dataclass(frozen=True)
class StructuredRecord:
    """结构化状态记录信号"""
    status: Optional[str] = None
    code: Optional[int] = None
    response_time_ms: Optional[float] = None
    start_time: Optional[str] = None
    last_updated: Optional[str] = None

    @property
    def kind(self) -> SignalKind:
        return SignalKind.RECORD


RawSignal = Union[BadgePair, StructuredRecord]


@dataclass
class CheckMetrics:
    """单次检查的展示指标"""
    response_time: str = "0"
    uptime: str = "0%"
    last_checked: datetime = field(default_factory=utc_now)


@dataclass
class HistoryRecord:
    """端点最近一次检查的持久化记录"""
    status: HealthState
    last_checked: str
    response_time: str
    uptime: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'lastChecked': self.last_checked,
            'responseTime': self.response_time,
            'uptime': self.uptime,
            'timestamp': self.timestamp
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HistoryRecord':
        return cls(
            status=HealthState.parse(data.get('status')),
            last_checked=str(data.get('lastChecked', '')),
            response_time=str(data.get('responseTime', '0')),
            uptime=str(data.get('uptime', '0%')),
            timestamp=int(data.get('timestamp') or 0)
        )


@dataclass(frozen=True)
class TransitionDescriptor:
    """上一次状态与本次状态之间的变化"""
    changed: bool
    previous_status: Optional[HealthState]
    current_status: HealthState
    is_recovery: bool = False
    is_outage: bool = False


class MessageKind(str, Enum):
    """通知消息类型，按优先级排列"""
    RECOVERY = "service_recovery"
    OUTAGE = "service_outage"
    STATUS_CHANGE = "status_change"
    ROUTINE = "routine_check"


@dataclass
class NotificationMessage:
    """与聊天平台无关的通知消息描述"""
    kind: MessageKind
    endpoint_name: str
    endpoint_url: str
    status: HealthState
    status_label: str
    status_emoji: str
    color: int
    severity: str
    headline: str
    footer: str
    response_time: str
    uptime: str
    checked_at: datetime
    transition: TransitionDescriptor
    previous_status: Optional[HealthState] = None
    previous_label: Optional[str] = None

    @property
    def title(self) -> str:
        return f"{self.status_emoji} {self.endpoint_name} - {self.status_label}"


@dataclass
class SummaryReport:
    """多个端点检查结果的汇总报告"""
    title: str
    overall_label: str
    color: int
    checked_at: datetime
    lines: List[Dict[str, str]] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)
    down_endpoints: List[Dict[str, str]] = field(default_factory=list)

    @property
    def has_down(self) -> bool:
        return bool(self.down_endpoints)


@dataclass
class CheckOutcome:
    """单个端点一次检查的结果"""
    endpoint: Endpoint
    status: Optional[HealthState] = None
    metrics: Optional[CheckMetrics] = None
    transition: Optional[TransitionDescriptor] = None
    notified: bool = False
    sent: bool = False
    skipped: bool = False
    error_message: Optional[str] = None
