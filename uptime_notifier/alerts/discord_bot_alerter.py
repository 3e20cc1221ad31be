"""Discord Bot 告警器实现

通过 Discord REST API 以 Bot 身份向指定频道发送消息。
会话只在一次运行期间存在，运行结束时调用 close() 下线。
"""

from typing import Any, Dict, Optional

import aiohttp

from .base import BaseAlerter
from .renderers import render_discord, render_summary
from ..models.config import NotifierConfig
from ..models.status import NotificationMessage, SummaryReport
from ..utils.exceptions import AlertConfigError, AlertSendError

DISCORD_API_BASE = 'https://discord.com/api/v10'


class DiscordBotAlerter(BaseAlerter):
    """Discord Bot 告警器"""

    def __init__(self, name: str, config: NotifierConfig):
        """
        初始化 Discord Bot 告警器

        Args:
            name: 告警器名称
            config: 运行配置，需要 bot_token 和 channel_id
        """
        super().__init__(name, config)
        self.bot_token = config.bot_token or ''
        self.channel_id = config.channel_id or ''
        self._session: Optional[aiohttp.ClientSession] = None

        if not self.validate_config():
            raise AlertConfigError(f"Discord Bot 告警器配置无效: {name}", alert_name=name)

    @property
    def messages_url(self) -> str:
        return f"{DISCORD_API_BASE}/channels/{self.channel_id}/messages"

    def validate_config(self) -> bool:
        if not self.bot_token:
            self.logger.error(f"Discord Bot 告警器 {self.name} 缺少 bot_token")
            return False

        if not str(self.channel_id).isdigit():
            self.logger.error(f"Discord Bot 告警器 {self.name} 频道ID无效: {self.channel_id}")
            return False

        return True

    async def open(self):
        """建立 Bot 会话"""
        if self._session is None:
            self._session = aiohttp.ClientSession(headers={
                'Authorization': f"Bot {self.bot_token}",
                'Content-Type': 'application/json'
            })
            self.logger.info("🤖 Discord Bot 会话已建立")

    async def close(self):
        """关闭 Bot 会话"""
        if self._session is not None:
            await self._session.close()
            self._session = None
            self.logger.info("🔌 Discord Bot 会话已关闭")

    async def send_alert(self, message: NotificationMessage) -> bool:
        """
        发送通知消息到频道

        Args:
            message: 通知消息对象

        Returns:
            bool: 发送是否成功
        """
        self.logger.info(
            f"开始发送 Bot 通知: 端点={message.endpoint_name}, 类型={message.kind.value}")
        return await self.send_payload(render_discord(message))

    async def send_summary(self, report: SummaryReport) -> bool:
        """
        发送汇总报告到频道

        Args:
            report: 汇总报告

        Returns:
            bool: 发送是否成功
        """
        return await self.send_payload(render_summary(report))

    async def send_payload(self, payload: Dict[str, Any]) -> bool:
        """
        发送一条频道消息

        Args:
            payload: 消息负载

        Returns:
            bool: 发送是否成功，失败不会重试
        """
        await self.open()
        try:
            success = await self._post_json(self._session, self.messages_url, payload)
        except AlertSendError as e:
            self.logger.error(f"Discord Bot 告警器 {self.name} 发送失败: {e.format_error()}")
            return False

        if success:
            self.logger.info(f"✅ 消息已发送到频道 {self.channel_id}")
        else:
            self.logger.error(f"Discord Bot 告警器 {self.name} 发送失败，放弃本次通知")
        return success
