"""配置管理器"""

import os
from typing import Any, Dict, Mapping, Optional

import yaml

from ..models.config import (
    DEFAULT_CHECK_DELAY, DEFAULT_HISTORY_FILE, TRANSPORT_WEBHOOK,
    NotifierConfig, parse_bool
)
from ..models.status import Endpoint, SignalKind
from ..utils.config_validator import ConfigValidator
from ..utils.exceptions import ConfigError, ErrorCode
from ..utils.log_manager import get_logger

# 环境变量 -> notification 配置项
NOTIFICATION_ENV_OVERRIDES = {
    'WEBHOOK_URL': 'webhook_url',
    'WEBHOOK_TYPE': 'webhook_type',
    'NOTIFY_ON_CHECK': 'notify_on_check',
    'BOT_TOKEN': 'bot_token',
    'DISCORD_CHANNEL_ID': 'channel_id',
}


class ConfigManager:
    """配置管理器，负责YAML配置文件的加载、解析和验证

    环境变量中的 WEBHOOK_URL 等配置项会覆盖文件中的同名设置，
    最终得到的 NotifierConfig 在一次运行内保持不变
    """

    def __init__(self, config_path: str, environ: Optional[Mapping[str, str]] = None):
        """
        初始化配置管理器

        Args:
            config_path: 配置文件路径
            environ: 环境变量映射，默认使用 os.environ
        """
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ
        self.config: Dict[str, Any] = {}
        self.logger = get_logger('config_manager')

    def load_config(self) -> Dict[str, Any]:
        """
        加载YAML配置文件并应用环境变量覆盖

        Returns:
            Dict[str, Any]: 配置字典

        Raises:
            ConfigError: 配置加载或验证失败
        """
        self.logger.info(f"开始加载配置文件: {self.config_path}")

        if not os.path.exists(self.config_path):
            self.logger.error(f"配置文件不存在: {self.config_path}")
            raise ConfigError(f"配置文件不存在: {self.config_path}",
                              ErrorCode.CONFIG_FILE_NOT_FOUND,
                              config_path=self.config_path)

        try:
            with open(self.config_path, 'r', encoding='utf-8') as file:
                config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            self.logger.error(f"YAML格式错误: {e}")
            raise ConfigError(f"YAML格式错误: {e}", ErrorCode.CONFIG_PARSE_ERROR,
                              config_path=self.config_path, cause=e)
        except PermissionError as e:
            self.logger.error(f"没有权限读取配置文件: {self.config_path}")
            raise ConfigError(f"没有权限读取配置文件: {self.config_path}",
                              ErrorCode.CONFIG_FILE_NOT_FOUND,
                              config_path=self.config_path, cause=e)
        except OSError as e:
            self.logger.error(f"加载配置文件失败: {e}")
            raise ConfigError(f"加载配置文件失败: {e}", ErrorCode.CONFIG_FILE_NOT_FOUND,
                              config_path=self.config_path, cause=e)

        if config is None:
            self.logger.error("配置文件为空")
            raise ConfigError("配置文件为空", config_path=self.config_path)

        if not isinstance(config, dict):
            raise ConfigError("配置文件根节点必须是字典类型", config_path=self.config_path)

        self._apply_env_overrides(config)

        self.logger.debug("开始验证配置文件内容")
        self._validate_config(config)

        endpoints_count = len(config.get('endpoints', {}))
        self.logger.info(f"配置验证成功，包含 {endpoints_count} 个监控端点")

        self.config = config
        return self.config

    def build_config(self) -> NotifierConfig:
        """
        加载配置文件并构建运行配置

        Returns:
            NotifierConfig: 不可变的运行配置
        """
        config = self.load_config()
        global_config = config.get('global', {})
        notification = config.get('notification', {})

        endpoints = []
        for name, endpoint_config in config.get('endpoints', {}).items():
            endpoints.append(Endpoint(
                name=str(name),
                url=str(endpoint_config['url']),
                data_path=str(endpoint_config['data_path']),
                source=SignalKind(endpoint_config.get('source', SignalKind.BADGE.value)),
                history_file=endpoint_config.get('history_file')
            ))

        channel_id = notification.get('channel_id')

        return NotifierConfig(
            endpoints=tuple(endpoints),
            transport=notification.get('transport', TRANSPORT_WEBHOOK),
            webhook_url=notification.get('webhook_url', ''),
            webhook_type=str(notification.get('webhook_type', 'discord')).lower(),
            notify_on_check=parse_bool(notification.get('notify_on_check', False)),
            bot_token=notification.get('bot_token'),
            channel_id=str(channel_id) if channel_id else None,
            status_history_file=(self.environ.get('STATUS_HISTORY_FILE')
                                 or global_config.get('status_history_file',
                                                      DEFAULT_HISTORY_FILE)),
            check_delay=float(global_config.get('check_delay', DEFAULT_CHECK_DELAY)),
            log_level=global_config.get('log_level', 'INFO'),
            log_file=global_config.get('log_file'),
            max_log_size=global_config.get('max_log_size', 10 * 1024 * 1024),
            log_backup_count=global_config.get('log_backup_count', 5)
        )

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> NotifierConfig:
        """
        仅根据环境变量构建运行配置（单次通知模式）

        Args:
            environ: 环境变量映射，默认使用 os.environ

        Returns:
            NotifierConfig: 不包含端点列表的运行配置

        Raises:
            ConfigError: 环境变量中的通知配置无效
        """
        environ = os.environ if environ is None else environ

        notification = {'transport': TRANSPORT_WEBHOOK}
        for env_key, option in NOTIFICATION_ENV_OVERRIDES.items():
            if environ.get(env_key):
                notification[option] = environ[env_key]
        notification.setdefault('webhook_type', 'slack')

        ConfigValidator.validate_notification_config(notification)

        return NotifierConfig(
            webhook_url=notification.get('webhook_url', ''),
            webhook_type=str(notification['webhook_type']).lower(),
            notify_on_check=parse_bool(notification.get('notify_on_check')),
            status_history_file=environ.get('STATUS_HISTORY_FILE') or DEFAULT_HISTORY_FILE
        )

    def _apply_env_overrides(self, config: Dict[str, Any]) -> None:
        """用环境变量覆盖通知配置"""
        notification = config.setdefault('notification', {})
        if not isinstance(notification, dict):
            return

        for env_key, option in NOTIFICATION_ENV_OVERRIDES.items():
            value = self.environ.get(env_key)
            if value:
                notification[option] = value
                self.logger.debug(f"环境变量 {env_key} 覆盖配置项 notification.{option}")

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """
        验证配置文件内容

        Args:
            config: 配置字典

        Raises:
            ConfigError: 配置验证失败
        """
        if 'global' in config:
            ConfigValidator.validate_global_config(config['global'])

        ConfigValidator.validate_notification_config(config.get('notification'))

        endpoints = config.get('endpoints')
        if not endpoints:
            raise ConfigError("配置文件中没有定义任何监控端点", config_path=self.config_path)

        if not isinstance(endpoints, dict):
            raise ConfigError("endpoints配置必须是字典类型", config_path=self.config_path)

        for endpoint_name, endpoint_config in endpoints.items():
            ConfigValidator.validate_endpoint_config(endpoint_name, endpoint_config)
