"""徽章文件读取器"""

import os

from .base import BaseStatusReader
from .factory import register_reader
from ..models.status import BadgePair, SignalKind
from ..utils.exceptions import ErrorCode, StatusSourceError

RESPONSE_TIME_FILE = 'response-time.json'
UPTIME_FILE = 'uptime.json'


@register_reader(SignalKind.BADGE)
class BadgeStatusReader(BaseStatusReader):
    """读取 response-time.json 和 uptime.json 两个徽章文件

    徽章格式: {schemaVersion, label, message, color}，可能附带 status 字段
    """

    def read_signal(self) -> BadgePair:
        response_time_file = os.path.join(self.endpoint.data_path, RESPONSE_TIME_FILE)
        uptime_file = os.path.join(self.endpoint.data_path, UPTIME_FILE)

        response_time_data = self.load_document(response_time_file)
        uptime_data = self.load_document(uptime_file)

        for file_path, data in ((response_time_file, response_time_data),
                                (uptime_file, uptime_data)):
            if 'message' not in data:
                raise StatusSourceError(
                    f"徽章文件缺少 message 字段: {file_path}",
                    ErrorCode.STATUS_SOURCE_INVALID,
                    endpoint_name=self.endpoint.name,
                    file_path=file_path
                )

        # 响应时间徽章上的 status 优先
        explicit_status = response_time_data.get('status') or uptime_data.get('status')

        return BadgePair(
            response_time_message=str(response_time_data['message']),
            response_time_color=str(response_time_data.get('color', '')).lower(),
            uptime_message=str(uptime_data['message']),
            uptime_color=str(uptime_data.get('color', '')).lower(),
            explicit_status=explicit_status
        )
