"""状态读取器工厂"""

from typing import Dict, Type

from .base import BaseStatusReader
from ..models.status import Endpoint, RawSignal, SignalKind
from ..utils.exceptions import ErrorCode, StatusSourceError


class StatusReaderFactory:
    """状态读取器工厂类，按数据源类型创建读取器"""

    def __init__(self):
        """初始化工厂"""
        self._readers: Dict[SignalKind, Type[BaseStatusReader]] = {}

    def register_reader(self, source: SignalKind, reader_class: Type[BaseStatusReader]):
        """
        注册状态读取器类

        Args:
            source: 数据源类型
            reader_class: 读取器类

        Raises:
            ValueError: 读取器类无效或重复注册
        """
        if not issubclass(reader_class, BaseStatusReader):
            raise ValueError(f"读取器类 {reader_class.__name__} 必须继承自 BaseStatusReader")

        if source in self._readers:
            raise ValueError(f"数据源类型 '{source.value}' 已经注册了读取器")

        self._readers[source] = reader_class

    def create_reader(self, endpoint: Endpoint) -> BaseStatusReader:
        """
        为端点创建读取器实例

        Args:
            endpoint: 被监控的端点

        Returns:
            BaseStatusReader: 读取器实例

        Raises:
            StatusSourceError: 数据源类型不支持
        """
        reader_class = self._readers.get(endpoint.source)
        if reader_class is None:
            raise StatusSourceError(
                f"不支持的数据源类型: '{endpoint.source}'",
                ErrorCode.STATUS_SOURCE_INVALID,
                endpoint_name=endpoint.name
            )
        return reader_class(endpoint)

    def get_supported_sources(self) -> list:
        """
        获取支持的数据源类型列表

        Returns:
            list: 数据源类型取值列表
        """
        return [source.value for source in self._readers]


# 全局工厂实例
status_reader_factory = StatusReaderFactory()


def register_reader(source: SignalKind):
    """
    装饰器：注册状态读取器类

    Args:
        source: 数据源类型

    Returns:
        装饰器函数
    """
    def decorator(reader_class: Type[BaseStatusReader]):
        status_reader_factory.register_reader(source, reader_class)
        return reader_class

    return decorator


def read_signal(endpoint: Endpoint) -> RawSignal:
    """
    读取端点原始状态信号的便捷函数

    Args:
        endpoint: 被监控的端点

    Returns:
        RawSignal: 原始状态信号

    Raises:
        StatusSourceError: 数据文件缺失或无法解析
    """
    return status_reader_factory.create_reader(endpoint).read_signal()
