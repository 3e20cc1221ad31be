"""Webhook 告警器实现"""

from typing import Any, Dict
from urllib.parse import urlparse

import aiohttp

from .base import BaseAlerter
from .renderers import render_payload, render_summary
from ..models.config import NotifierConfig, SUPPORTED_WEBHOOK_TYPES
from ..models.status import NotificationMessage, SummaryReport
from ..utils.exceptions import AlertConfigError, AlertSendError


class WebhookAlerter(BaseAlerter):
    """Webhook 告警器，把通知以 JSON POST 发送到 Slack / Discord / 自定义地址"""

    def __init__(self, name: str, config: NotifierConfig):
        """
        初始化 Webhook 告警器

        Args:
            name: 告警器名称
            config: 运行配置
        """
        super().__init__(name, config)
        self.url = config.webhook_url
        self.webhook_type = (config.webhook_type or '').lower()

        if not self.validate_config():
            raise AlertConfigError(f"Webhook 告警器配置无效: {name}", alert_name=name)

    @property
    def supports_summary(self) -> bool:
        """只有 Discord 格式支持汇总报告"""
        return self.webhook_type == 'discord'

    def validate_config(self) -> bool:
        """
        验证配置参数是否有效

        Returns:
            bool: 配置是否有效
        """
        if not self.url:
            self.logger.error(f"Webhook 告警器 {self.name} 缺少URL配置")
            return False

        parsed_url = urlparse(self.url)
        if not parsed_url.scheme or not parsed_url.netloc:
            self.logger.error(f"Webhook 告警器 {self.name} URL格式无效: {self.url}")
            return False

        if self.webhook_type not in SUPPORTED_WEBHOOK_TYPES:
            self.logger.error(
                f"Webhook 告警器 {self.name} 不支持的类型: {self.webhook_type}, "
                f"支持的类型: {list(SUPPORTED_WEBHOOK_TYPES)}"
            )
            return False

        if self.webhook_type == 'discord' and 'discord.com/api/webhooks/' not in self.url:
            self.logger.warning(f"Webhook 告警器 {self.name} 的 URL 看起来不是 Discord 格式")

        return True

    async def send_alert(self, message: NotificationMessage) -> bool:
        """
        发送通知消息

        Args:
            message: 通知消息对象

        Returns:
            bool: 发送是否成功
        """
        self.logger.info(
            f"开始发送通知: 端点={message.endpoint_name}, 类型={message.kind.value}, "
            f"状态={message.status.value}")
        return await self.send_payload(render_payload(self.webhook_type, message))

    async def send_summary(self, report: SummaryReport) -> bool:
        """
        发送汇总报告，仅 Discord 格式支持

        Args:
            report: 汇总报告

        Returns:
            bool: 发送是否成功
        """
        if not self.supports_summary:
            self.logger.warning(f"{self.webhook_type} 类型的 webhook 不支持汇总报告，跳过发送")
            return False
        return await self.send_payload(render_summary(report))

    async def send_payload(self, payload: Dict[str, Any]) -> bool:
        """
        发送一次 webhook 请求

        Args:
            payload: JSON 负载

        Returns:
            bool: 发送是否成功，失败不会重试
        """
        try:
            success = await self._send_request(payload)
        except AlertSendError as e:
            self.logger.error(f"Webhook 告警器 {self.name} 发送失败: {e.format_error()}")
            return False

        if success:
            self.logger.info(f"Webhook 告警器 {self.name} 发送成功")
        else:
            self.logger.error(f"Webhook 告警器 {self.name} 发送失败，放弃本次通知")
        return success

    async def _send_request(self, payload: Dict[str, Any]) -> bool:
        """
        发送HTTP请求

        Args:
            payload: JSON 负载

        Returns:
            bool: 请求是否成功
        """
        async with aiohttp.ClientSession() as session:
            return await self._post_json(session, self.url, payload)
