"""告警器基类"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict

import aiohttp

from ..models.config import NotifierConfig
from ..models.status import NotificationMessage, SummaryReport
from ..utils.exceptions import AlertSendError
from ..utils.log_manager import get_logger


class BaseAlerter(ABC):
    """告警器抽象基类

    每条消息只发送一次，失败时返回False，不做重试
    """

    def __init__(self, name: str, config: NotifierConfig):
        """
        初始化告警器

        Args:
            name: 告警器名称
            config: 运行配置
        """
        self.name = name
        self.config = config
        self.alerter_type = self.__class__.__name__.replace('Alerter', '').lower()
        self.logger = get_logger(f'alerter.{self.alerter_type}')

    @property
    def supports_summary(self) -> bool:
        """是否支持发送汇总报告"""
        return True

    @abstractmethod
    async def send_alert(self, message: NotificationMessage) -> bool:
        """
        发送通知消息

        Args:
            message: 通知消息对象

        Returns:
            bool: 发送是否成功
        """
        pass

    @abstractmethod
    async def send_summary(self, report: SummaryReport) -> bool:
        """
        发送汇总报告

        Args:
            report: 汇总报告

        Returns:
            bool: 发送是否成功
        """
        pass

    @abstractmethod
    def validate_config(self) -> bool:
        """
        验证配置参数是否有效

        Returns:
            bool: 配置是否有效
        """
        pass

    async def close(self):
        """释放告警器持有的资源"""

    async def _post_json(self, session: aiohttp.ClientSession, url: str,
                         payload: Dict[str, Any]) -> bool:
        """
        发送一次 JSON POST 请求

        Args:
            session: HTTP 会话
            url: 目标地址
            payload: JSON 负载

        Returns:
            bool: 2xx 返回True，其他状态码返回False

        Raises:
            AlertSendError: 网络错误或请求超时
        """
        self.logger.debug(f"发送负载: {json.dumps(payload, ensure_ascii=False)[:500]}")
        try:
            async with session.post(url, json=payload) as response:
                if 200 <= response.status < 300:
                    self.logger.debug(f"告警器 {self.name} 发送成功 (状态码: {response.status})")
                    return True

                response_text = await response.text()
                self.logger.warning(
                    f"告警器 {self.name} 收到错误响应 "
                    f"(状态码: {response.status}, 响应: {response_text[:200]})"
                )
                return False

        except aiohttp.ClientError as e:
            self.logger.error(f"告警器 {self.name} 网络请求失败: {e}")
            raise AlertSendError(f"HTTP请求失败: {e}", alert_name=self.name, cause=e)

        except asyncio.TimeoutError as e:
            self.logger.error(f"告警器 {self.name} 请求超时")
            raise AlertSendError("HTTP请求超时", alert_name=self.name, cause=e)
