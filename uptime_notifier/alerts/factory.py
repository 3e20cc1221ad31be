"""告警器工厂"""

from .base import BaseAlerter
from .discord_bot_alerter import DiscordBotAlerter
from .webhook_alerter import WebhookAlerter
from ..models.config import NotifierConfig, TRANSPORT_BOT, TRANSPORT_WEBHOOK
from ..utils.exceptions import AlertConfigError


def create_alerter(config: NotifierConfig) -> BaseAlerter:
    """
    根据运行配置创建告警器

    Args:
        config: 运行配置

    Returns:
        BaseAlerter: Webhook 或 Discord Bot 告警器

    Raises:
        AlertConfigError: 传输方式不支持或配置无效
    """
    if config.transport == TRANSPORT_BOT:
        return DiscordBotAlerter('discord-bot', config)
    if config.transport == TRANSPORT_WEBHOOK:
        return WebhookAlerter(f'{config.webhook_type}-webhook', config)
    raise AlertConfigError(f"不支持的传输方式: {config.transport}")
