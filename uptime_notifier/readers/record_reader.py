"""结构化状态记录读取器"""

import math
import os
from typing import Any, Optional

from .base import BaseStatusReader
from .factory import register_reader
from ..models.status import SignalKind, StructuredRecord

RECORD_FILE = 'status.json'


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _to_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # YAML 的 .inf / .nan 视为缺失
    return number if math.isfinite(number) else None


@register_reader(SignalKind.RECORD)
class RecordStatusReader(BaseStatusReader):
    """读取单个结构化状态记录

    data_path 可以直接指向记录文件（例如 history/<slug>.yml），
    也可以是包含 status.json 的目录
    """

    def get_record_file(self) -> str:
        data_path = self.endpoint.data_path
        if os.path.isdir(data_path):
            return os.path.join(data_path, RECORD_FILE)
        return data_path

    def read_signal(self) -> StructuredRecord:
        data = self.load_document(self.get_record_file())

        status = data.get('status')
        last_updated = data.get('lastUpdated')
        start_time = data.get('startTime')

        return StructuredRecord(
            status=str(status) if status else None,
            code=_to_int(data.get('code')),
            response_time_ms=_to_float(data.get('responseTime')),
            start_time=str(start_time) if start_time else None,
            last_updated=str(last_updated) if last_updated else None
        )
