"""通知消息渲染器

把 NotificationMessage / SummaryReport 转换成各聊天平台的 JSON 负载
"""

import time
from typing import Any, Callable, Dict, List

from .builder import FOOTER_PREFIX, RED, format_response_time
from ..models.status import (
    HealthState, NotificationMessage, SummaryReport, to_utc_isoformat
)
from ..utils.exceptions import AlertConfigError

ICON_URL = 'https://raw.githubusercontent.com/upptime/upptime.js.org/master/static/img/icon.svg'
TIME_FORMAT = '%Y-%m-%d %H:%M:%S'

SLACK_COLORS = {
    HealthState.UP: 'good',
    HealthState.SLOW: 'warning',
    HealthState.DOWN: 'danger',
    HealthState.UNKNOWN: 'danger',
}


def _message_fields(message: NotificationMessage) -> List[Dict[str, str]]:
    fields = [
        {'name': '当前状态', 'value': message.status_label},
        {'name': '响应时间', 'value': format_response_time(message.response_time)},
        {'name': '运行时间', 'value': message.uptime},
        {'name': '检查时间', 'value': message.checked_at.astimezone().strftime(TIME_FORMAT)},
    ]
    if message.previous_label:
        fields.append({'name': '之前状态', 'value': message.previous_label})
    return fields


def render_slack(message: NotificationMessage) -> Dict[str, Any]:
    """渲染 Slack attachment 格式"""
    attachment = {
        'color': SLACK_COLORS.get(message.status, 'danger'),
        'title': message.title,
        'text': message.headline,
        'fields': [
            {'title': f['name'], 'value': f['value'], 'short': True}
            for f in _message_fields(message)
        ],
        'footer': message.footer,
        'ts': int(message.checked_at.timestamp())
    }
    if message.endpoint_url:
        attachment['title_link'] = message.endpoint_url
    return {'attachments': [attachment]}


def render_discord_embed(message: NotificationMessage) -> Dict[str, Any]:
    """渲染单个 Discord embed"""
    embed = {
        'title': message.title,
        'description': message.headline,
        'color': message.color,
        'thumbnail': {'url': ICON_URL},
        'fields': [
            {'name': f['name'], 'value': f['value'], 'inline': True}
            for f in _message_fields(message)
        ],
        'footer': {'text': message.footer, 'icon_url': ICON_URL},
        'timestamp': to_utc_isoformat(message.checked_at)
    }
    # Discord 不接受空字符串 url
    if message.endpoint_url:
        embed['url'] = message.endpoint_url
    return embed


def render_discord(message: NotificationMessage) -> Dict[str, Any]:
    """渲染 Discord embeds 格式"""
    return {'embeds': [render_discord_embed(message)]}


def render_custom(message: NotificationMessage) -> Dict[str, Any]:
    """渲染自定义 JSON 格式"""
    try:
        response_time = int(float(message.response_time))
    except (TypeError, ValueError):
        response_time = None

    transition = message.transition
    return {
        'site': {
            'name': message.endpoint_name,
            'url': message.endpoint_url,
            'status': message.status.value,
            'responseTime': response_time,
            'uptime': message.uptime,
            'lastChecked': to_utc_isoformat(message.checked_at),
            'timestamp': int(time.time() * 1000),
            'previousStatus': (message.previous_status.value
                               if message.previous_status else None)
        },
        'notification': {
            'type': message.kind.value,
            'message': message.headline,
            'severity': message.severity,
            'checkType': 'status_change_monitoring',
            'statusChange': {
                'changed': transition.changed,
                'isRecovery': transition.is_recovery,
                'isOutage': transition.is_outage
            }
        }
    }


RENDERERS: Dict[str, Callable[[NotificationMessage], Dict[str, Any]]] = {
    'slack': render_slack,
    'discord': render_discord,
    'custom': render_custom,
}


def render_payload(webhook_type: str, message: NotificationMessage) -> Dict[str, Any]:
    """
    按 webhook 类型渲染通知负载

    Args:
        webhook_type: slack / discord / custom
        message: 通知消息

    Returns:
        Dict[str, Any]: JSON 负载

    Raises:
        AlertConfigError: 不支持的 webhook 类型
    """
    renderer = RENDERERS.get(str(webhook_type).lower())
    if renderer is None:
        raise AlertConfigError(
            f"不支持的 webhook 类型: {webhook_type}，支持的类型: {list(RENDERERS)}")
    return renderer(message)


def render_summary(report: SummaryReport) -> Dict[str, Any]:
    """
    渲染汇总报告为 Discord embeds

    存在异常端点时额外附加一条紧急告警 embed
    """
    counts = report.counts
    status_embed = {
        'title': report.title,
        'description': (f"**整体状态**: {report.overall_label}\n"
                        f"**检查时间**: {report.checked_at.astimezone().strftime(TIME_FORMAT)}"),
        'color': report.color,
        'fields': [
            {'name': line['name'], 'value': line['value'], 'inline': True}
            for line in report.lines
        ],
        'footer': {'text': f"{FOOTER_PREFIX} - 状态报告", 'icon_url': ICON_URL},
        'timestamp': to_utc_isoformat(report.checked_at)
    }
    status_embed['fields'].append({
        'name': '📊 统计摘要',
        'value': (f"🟢 正常: {counts.get('up', 0)} 个\n"
                  f"🟡 缓慢: {counts.get('slow', 0)} 个\n"
                  f"🔴 异常: {counts.get('down', 0)} 个"),
        'inline': False
    })

    embeds = [status_embed]
    if report.has_down:
        embeds.append({
            'title': '🚨 紧急告警',
            'description': '检测到服务异常，请立即检查！',
            'color': RED,
            'fields': [
                {
                    'name': f"🔴 {item['name']}",
                    'value': (f"状态: {item['status_label']}\n"
                              f"响应时间: {format_response_time(item['response_time'])}"),
                    'inline': True
                }
                for item in report.down_endpoints
            ],
            'timestamp': to_utc_isoformat(report.checked_at)
        })

    return {'embeds': embeds}
