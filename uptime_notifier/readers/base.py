"""状态读取器基类"""

import json
import math
import os
import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

import yaml

from ..models.status import CheckMetrics, Endpoint, RawSignal, SignalKind, utc_now
from ..utils.exceptions import ErrorCode, StatusSourceError
from ..utils.log_manager import get_logger

UNKNOWN_METRIC = '未知'

_NUMBER_PATTERN = re.compile(r'-?\d+(?:\.\d+)?')


def parse_response_time(message: Optional[str]) -> str:
    """从 "12737 ms" 形式的徽章文本中取出数值部分

    Args:
        message: 响应时间徽章文本

    Returns:
        str: 去掉单位后的响应时间，无法解析时返回 "0"
    """
    if not message:
        return '0'
    return str(message).replace('ms', '').strip() or '0'


def parse_uptime(message: Optional[str]) -> Optional[float]:
    """从 "99.03%" 形式的徽章文本中解析运行时间百分比

    Returns:
        Optional[float]: 百分比数值，无法解析时返回None
    """
    if message is None:
        return None
    match = _NUMBER_PATTERN.search(str(message))
    if not match:
        return None
    return float(match.group())


def metrics_from_signal(signal: RawSignal,
                        checked_at: Optional[datetime] = None) -> CheckMetrics:
    """根据原始信号生成展示指标

    Args:
        signal: 原始状态信号
        checked_at: 检查时间，默认为当前时间

    Returns:
        CheckMetrics: 展示用的响应时间、运行时间和检查时间
    """
    checked_at = checked_at or utc_now()

    if signal.kind == SignalKind.RECORD:
        value = signal.response_time_ms
        # .inf / NaN 无法转换为整数毫秒
        response_time = (
            str(int(value))
            if value is not None and math.isfinite(value) else UNKNOWN_METRIC
        )
        return CheckMetrics(response_time=response_time,
                            uptime=UNKNOWN_METRIC,
                            last_checked=checked_at)

    return CheckMetrics(
        response_time=parse_response_time(signal.response_time_message),
        uptime=signal.uptime_message or '0%',
        last_checked=checked_at
    )


class BaseStatusReader(ABC):
    """状态读取器抽象基类

    从外部监控程序写出的文件中读取一个端点的状态快照
    """

    def __init__(self, endpoint: Endpoint):
        """
        初始化状态读取器

        Args:
            endpoint: 被读取的端点
        """
        self.endpoint = endpoint
        self.source_type = self.__class__.__name__.replace('StatusReader', '').lower()
        self.logger = get_logger(f'reader.{self.source_type}')

    @abstractmethod
    def read_signal(self) -> RawSignal:
        """
        读取端点的原始状态信号

        Returns:
            RawSignal: 徽章信号或结构化记录

        Raises:
            StatusSourceError: 数据文件缺失或无法解析
        """
        pass

    def load_document(self, file_path: str) -> Dict[str, Any]:
        """
        读取一个JSON或YAML文档

        Args:
            file_path: 文件路径，.yml/.yaml 按YAML解析，其余按JSON解析

        Returns:
            Dict[str, Any]: 文档内容

        Raises:
            StatusSourceError: 文件不存在、无法读取或格式错误
        """
        if not os.path.exists(file_path):
            raise StatusSourceError(
                f"数据文件不存在: {file_path}",
                ErrorCode.STATUS_SOURCE_NOT_FOUND,
                endpoint_name=self.endpoint.name,
                file_path=file_path
            )

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                if file_path.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise StatusSourceError(
                f"无法读取数据文件 {file_path}: {e}",
                ErrorCode.STATUS_SOURCE_UNREADABLE,
                endpoint_name=self.endpoint.name,
                file_path=file_path,
                cause=e
            )

        if not isinstance(data, dict):
            raise StatusSourceError(
                f"数据文件内容必须是字典类型: {file_path}",
                ErrorCode.STATUS_SOURCE_INVALID,
                endpoint_name=self.endpoint.name,
                file_path=file_path
            )

        self.logger.debug(f"已读取数据文件: {file_path}")
        return data
