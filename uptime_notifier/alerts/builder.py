"""通知决策与消息构建

只产出与平台无关的 NotificationMessage / SummaryReport，
具体的 Slack、Discord、自定义格式由 renderers 模块负责
"""

from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple

from ..models.status import (
    CheckMetrics, CheckOutcome, Endpoint, HealthState, MessageKind,
    NotificationMessage, SummaryReport, TransitionDescriptor, utc_now
)

FOOTER_PREFIX = 'Upptime 监控系统'

GREEN = 0x00ff00
ORANGE = 0xffa500
RED = 0xff0000
GREY = 0x9e9e9e

# 状态 -> (表情, 文字, 颜色)
STATUS_PRESENTATION: Dict[HealthState, Tuple[str, str, int]] = {
    HealthState.UP: ('🟢', '正常运行', GREEN),
    HealthState.SLOW: ('🟡', '运行缓慢', ORANGE),
    HealthState.DOWN: ('🔴', '服务异常', RED),
    HealthState.UNKNOWN: ('⚪', '状态未知', GREY),
}

SHORT_LABELS = {
    HealthState.UP: '正常',
    HealthState.SLOW: '缓慢',
    HealthState.DOWN: '异常',
    HealthState.UNKNOWN: '未知',
}

FOOTERS = {
    MessageKind.RECOVERY: '服务恢复通知',
    MessageKind.OUTAGE: '服务异常通知',
    MessageKind.STATUS_CHANGE: '状态变化通知',
    MessageKind.ROUTINE: '例行检查通知',
}


def format_response_time(response_time: str) -> str:
    """为数值型响应时间加上 ms 单位"""
    try:
        float(response_time)
    except (TypeError, ValueError):
        return str(response_time)
    return f"{response_time}ms"


def get_status_info(status: HealthState) -> Tuple[str, str, int]:
    """获取状态对应的表情、文字和颜色"""
    return STATUS_PRESENTATION.get(status, STATUS_PRESENTATION[HealthState.UNKNOWN])


def should_notify(transition: TransitionDescriptor, notify_on_check: bool) -> bool:
    """
    判断是否需要发送通知

    Args:
        transition: 状态变化描述
        notify_on_check: 是否每次检查都发送通知

    Returns:
        bool: 状态发生变化或启用了每次检查通知时返回True
    """
    return transition.changed or notify_on_check


def _select_kind(transition: TransitionDescriptor,
                 notify_on_check: bool) -> Optional[MessageKind]:
    if transition.is_recovery:
        return MessageKind.RECOVERY
    if transition.is_outage:
        return MessageKind.OUTAGE
    if transition.changed:
        return MessageKind.STATUS_CHANGE
    if notify_on_check:
        return MessageKind.ROUTINE
    return None


def _headline(kind: MessageKind, status: HealthState, name: str) -> str:
    if kind == MessageKind.RECOVERY:
        if status == HealthState.SLOW:
            return f"🔄 服务恢复但运行缓慢 - {name} 已重新上线但响应较慢"
        return f"🎉 服务恢复正常！{name} 已重新上线"

    if kind == MessageKind.OUTAGE:
        return f"🚨 服务异常！{name} 目前无法访问"

    if kind == MessageKind.STATUS_CHANGE:
        if status == HealthState.UP:
            return f"✅ 状态变化 - {name} 现在正常运行"
        if status == HealthState.SLOW:
            return f"⚠️ 状态变化 - {name} 现在运行缓慢"
        if status == HealthState.UNKNOWN:
            return f"⚠️ 状态变化 - {name} 状态未知"
        return f"⚠️ 状态变化 - {name} 服务异常"

    if status == HealthState.UP:
        return f"📊 例行检查完成 - {name} 运行正常"
    if status == HealthState.SLOW:
        return f"📊 例行检查完成 - {name} 运行缓慢但可用"
    if status == HealthState.UNKNOWN:
        return f"📊 例行检查完成 - {name} 状态未知"
    return f"📊 例行检查完成 - {name} 服务异常"


def _severity(kind: MessageKind, status: HealthState) -> str:
    if kind == MessageKind.RECOVERY:
        return 'success'
    if kind == MessageKind.OUTAGE:
        return 'error'
    if status == HealthState.UP:
        return 'info'
    if status == HealthState.DOWN and kind == MessageKind.ROUTINE:
        return 'error'
    return 'warning'


def build_message(transition: TransitionDescriptor, endpoint: Endpoint,
                  current_status: HealthState, metrics: CheckMetrics,
                  notify_on_check: bool = False) -> Optional[NotificationMessage]:
    """
    构建通知消息

    按 服务恢复 > 服务异常 > 其他状态变化 > 例行检查 的优先级选择消息类型。
    状态未变化且未启用每次检查通知时返回None，不发送任何消息。

    Args:
        transition: 状态变化描述
        endpoint: 被监控的端点
        current_status: 本次检查的状态
        metrics: 本次检查的展示指标
        notify_on_check: 是否每次检查都发送通知

    Returns:
        Optional[NotificationMessage]: 通知消息
    """
    kind = _select_kind(transition, notify_on_check)
    if kind is None:
        return None

    emoji, label, color = get_status_info(current_status)
    previous = transition.previous_status

    return NotificationMessage(
        kind=kind,
        endpoint_name=endpoint.name,
        endpoint_url=endpoint.url,
        status=current_status,
        status_label=label,
        status_emoji=emoji,
        color=color,
        severity=_severity(kind, current_status),
        headline=_headline(kind, current_status, endpoint.name),
        footer=f"{FOOTER_PREFIX} - {FOOTERS[kind]}",
        response_time=metrics.response_time,
        uptime=metrics.uptime,
        checked_at=metrics.last_checked,
        transition=transition,
        previous_status=previous,
        previous_label=SHORT_LABELS.get(previous) if previous else None
    )


def build_test_message(endpoint: Endpoint) -> NotificationMessage:
    """构建用于验证通知通道的例行检查消息"""
    transition = TransitionDescriptor(
        changed=False,
        previous_status=HealthState.UP,
        current_status=HealthState.UP
    )
    metrics = CheckMetrics(response_time='0', uptime='100%')
    message = build_message(transition, endpoint, HealthState.UP, metrics,
                            notify_on_check=True)
    message.headline = f"🤖 通知通道测试 - 如果看到这则消息，表示 {endpoint.name} 的通知设置正确"
    return message


def build_summary(outcomes: Iterable[CheckOutcome],
                  checked_at: Optional[datetime] = None) -> Optional[SummaryReport]:
    """
    汇总多个端点的检查结果

    Args:
        outcomes: 各端点的检查结果，跳过的端点不计入
        checked_at: 报告时间，默认为当前时间

    Returns:
        Optional[SummaryReport]: 汇总报告，没有可用结果时返回None
    """
    checked = [o for o in outcomes if o.status is not None and not o.skipped]
    if not checked:
        return None

    statuses = [o.status for o in checked]
    if HealthState.DOWN in statuses:
        title, overall, color = '🚨 服务状态异常', '🔴 部分服务异常', RED
    elif HealthState.SLOW in statuses:
        title, overall, color = '⚠️ 服务状态警告', '🟡 服务运行缓慢', ORANGE
    else:
        title, overall, color = '✅ 服务状态正常', '🟢 所有服务正常', GREEN

    report = SummaryReport(
        title=title,
        overall_label=overall,
        color=color,
        checked_at=checked_at or utc_now()
    )

    for outcome in checked:
        emoji, label, _ = get_status_info(outcome.status)
        response_time = outcome.metrics.response_time if outcome.metrics else '0'
        uptime = outcome.metrics.uptime if outcome.metrics else '0%'
        report.lines.append({
            'name': outcome.endpoint.name,
            'value': (f"**状态**: {emoji} {label}\n"
                      f"**响应时间**: {format_response_time(response_time)}\n"
                      f"**运行时间**: {uptime}")
        })
        if outcome.status == HealthState.DOWN:
            report.down_endpoints.append({
                'name': outcome.endpoint.name,
                'status_label': label,
                'response_time': response_time
            })

    report.counts = {state.value: statuses.count(state) for state in HealthState}
    return report
