"""配置验证工具"""

from typing import Dict, Any
from urllib.parse import urlparse

from .exceptions import ConfigError
from ..models.config import SUPPORTED_TRANSPORTS, SUPPORTED_WEBHOOK_TYPES, TRANSPORT_BOT
from ..models.status import SignalKind


class ConfigValidator:
    """配置验证器"""

    @staticmethod
    def validate_endpoint_config(endpoint_name: str, config: Dict[str, Any]) -> None:
        """
        验证端点配置

        Args:
            endpoint_name: 端点名称
            config: 端点配置

        Raises:
            ConfigError: 配置验证失败
        """
        if not isinstance(config, dict):
            raise ConfigError(f"端点 '{endpoint_name}' 的配置必须是字典类型")

        required_fields = ['url', 'data_path']
        for field in required_fields:
            if not config.get(field):
                raise ConfigError(f"端点 '{endpoint_name}' 缺少必需的配置项: {field}")

        supported_sources = [kind.value for kind in SignalKind]
        source = config.get('source', SignalKind.BADGE.value)
        if source not in supported_sources:
            raise ConfigError(
                f"端点 '{endpoint_name}' 的数据源类型 '{source}' 不受支持。支持的类型: {supported_sources}")

    @staticmethod
    def validate_notification_config(notification_config: Dict[str, Any]) -> None:
        """
        验证通知配置

        Args:
            notification_config: 通知配置

        Raises:
            ConfigError: 配置验证失败
        """
        if not isinstance(notification_config, dict):
            raise ConfigError("通知配置必须是字典类型")

        transport = notification_config.get('transport', 'webhook')
        if transport not in SUPPORTED_TRANSPORTS:
            raise ConfigError(
                f"transport 必须是以下值之一: {list(SUPPORTED_TRANSPORTS)}")

        webhook_type = str(notification_config.get('webhook_type', 'discord')).lower()
        if webhook_type not in SUPPORTED_WEBHOOK_TYPES:
            raise ConfigError(
                f"webhook_type 必须是以下值之一: {list(SUPPORTED_WEBHOOK_TYPES)}")

        if transport == TRANSPORT_BOT:
            for field in ('bot_token', 'channel_id'):
                if not notification_config.get(field):
                    raise ConfigError(f"Bot 通知缺少必需的配置项: {field}")
            return

        webhook_url = notification_config.get('webhook_url')
        if not webhook_url:
            raise ConfigError("通知配置缺少必需的配置项: webhook_url")

        parsed_url = urlparse(str(webhook_url))
        if parsed_url.scheme not in ('http', 'https') or not parsed_url.netloc:
            raise ConfigError(f"webhook_url 格式无效: {webhook_url}")

    @staticmethod
    def validate_global_config(global_config: Dict[str, Any]) -> None:
        """
        验证全局配置

        Args:
            global_config: 全局配置

        Raises:
            ConfigError: 配置验证失败
        """
        if not isinstance(global_config, dict):
            raise ConfigError("全局配置必须是字典类型")

        # 验证检查间隔
        check_delay = global_config.get('check_delay')
        if check_delay is not None:
            if isinstance(check_delay, bool) or not isinstance(check_delay, (int, float)) \
                    or check_delay < 0:
                raise ConfigError("check_delay 必须是非负数")

        # 验证日志级别
        log_level = global_config.get('log_level')
        if log_level is not None:
            valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
            if log_level not in valid_levels:
                raise ConfigError(f"log_level 必须是以下值之一: {valid_levels}")
