"""运行配置数据模型"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional, Tuple

from .status import Endpoint, utc_now

DEFAULT_HISTORY_FILE = 'status-history.json'
DEFAULT_CHECK_DELAY = 1.0

TRANSPORT_WEBHOOK = 'webhook'
TRANSPORT_BOT = 'bot'
SUPPORTED_TRANSPORTS = (TRANSPORT_WEBHOOK, TRANSPORT_BOT)
SUPPORTED_WEBHOOK_TYPES = ('slack', 'discord', 'custom')


def parse_bool(value) -> bool:
    """解析 "true"/"false" 形式的开关值"""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


@dataclass(frozen=True)
class NotifierConfig:
    """一次运行的完整配置，启动时构建一次后显式传递"""
    endpoints: Tuple[Endpoint, ...] = ()
    transport: str = TRANSPORT_WEBHOOK
    webhook_url: str = ''
    webhook_type: str = 'discord'
    notify_on_check: bool = False
    bot_token: Optional[str] = None
    channel_id: Optional[str] = None
    status_history_file: str = DEFAULT_HISTORY_FILE
    check_delay: float = DEFAULT_CHECK_DELAY
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    max_log_size: int = 10 * 1024 * 1024
    log_backup_count: int = 5

    def history_file_for(self, endpoint: Endpoint) -> str:
        """获取端点使用的状态历史文件"""
        return endpoint.history_file or self.status_history_file

    def get_logging_config(self) -> dict:
        log_config = {
            'log_level': self.log_level,
            'enable_console': True,
            'enable_file': bool(self.log_file)
        }
        if self.log_file:
            log_config['log_file'] = self.log_file
            log_config['max_file_size'] = self.max_log_size
            log_config['backup_count'] = self.log_backup_count
        return log_config


@dataclass(frozen=True)
class SiteCheck:
    """由环境变量描述的单次端点检查

    对应 SITE_NAME / SITE_URL / SITE_STATUS / RESPONSE_TIME / UPTIME / LAST_CHECKED
    """
    name: str = 'Unknown Site'
    url: str = ''
    status: str = 'up'
    response_time: str = '0'
    uptime: str = '0%'
    last_checked: datetime = field(default_factory=utc_now)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'SiteCheck':
        environ = os.environ if environ is None else environ

        last_checked = utc_now()
        raw_last_checked = environ.get('LAST_CHECKED')
        if raw_last_checked:
            try:
                last_checked = datetime.fromisoformat(raw_last_checked.replace('Z', '+00:00'))
            except ValueError:
                # 无法解析时使用当前时间
                last_checked = utc_now()
            else:
                if last_checked.tzinfo is None:
                    last_checked = last_checked.astimezone()

        return cls(
            name=environ.get('SITE_NAME') or 'Unknown Site',
            url=environ.get('SITE_URL', ''),
            status=environ.get('SITE_STATUS') or 'up',
            response_time=environ.get('RESPONSE_TIME') or '0',
            uptime=environ.get('UPTIME') or '0%',
            last_checked=last_checked
        )
