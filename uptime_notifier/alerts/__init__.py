"""告警模块"""

from .base import BaseAlerter
from .builder import build_message, build_summary, build_test_message, should_notify
from .discord_bot_alerter import DiscordBotAlerter
from .factory import create_alerter
from .renderers import render_payload, render_summary
from .webhook_alerter import WebhookAlerter

__all__ = [
    'BaseAlerter',
    'WebhookAlerter',
    'DiscordBotAlerter',
    'create_alerter',
    'should_notify',
    'build_message',
    'build_summary',
    'build_test_message',
    'render_payload',
    'render_summary'
]
