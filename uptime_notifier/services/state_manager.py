"""状态管理器模块

负责读写端点状态历史文件，并检测端点状态变化
"""

import json
import os
import time
from pathlib import Path
from typing import Dict, Optional

from ..models.status import (
    CheckMetrics, HealthState, HistoryRecord, TransitionDescriptor, to_utc_isoformat
)
from ..utils.exceptions import ErrorCode, StateManagerError
from ..utils.log_manager import get_logger


class StateManager:
    """状态管理器

    历史文件保存 {端点名称: 最近一次检查记录} 的映射，
    每次检测都会无条件覆盖该端点的记录。
    不做文件加锁，同一时间只允许一个进程写入。
    """

    def __init__(self, persistence_file: str):
        """初始化状态管理器

        Args:
            persistence_file: 状态历史文件路径
        """
        self.persistence_file = persistence_file
        self.logger = get_logger('state_manager')

    def detect_change(self, endpoint_key: str, current_status: HealthState,
                      metrics: Optional[CheckMetrics] = None) -> TransitionDescriptor:
        """检测端点状态变化并覆盖写入最新记录

        Args:
            endpoint_key: 端点名称
            current_status: 本次分类得到的状态
            metrics: 本次检查的展示指标

        Returns:
            TransitionDescriptor: 状态变化描述
        """
        metrics = metrics or CheckMetrics()
        history = self.load_history()

        previous_record = history.get(endpoint_key)
        previous_status = previous_record.status if previous_record else None

        changed = previous_status != current_status
        transition = TransitionDescriptor(
            changed=changed,
            previous_status=previous_status,
            current_status=current_status,
            is_recovery=(previous_status == HealthState.DOWN
                         and current_status == HealthState.UP),
            is_outage=(previous_status == HealthState.UP
                       and current_status == HealthState.DOWN)
        )

        history[endpoint_key] = HistoryRecord(
            status=current_status,
            last_checked=to_utc_isoformat(metrics.last_checked),
            response_time=metrics.response_time,
            uptime=metrics.uptime,
            timestamp=int(time.time() * 1000)
        )
        self.save_history(history)

        if previous_status is None:
            self.logger.info(f"端点 {endpoint_key} 初始状态: {current_status.value}")
        elif changed:
            self.logger.warning(
                f"端点 {endpoint_key} 状态变化: {previous_status.value} -> {current_status.value}"
            )
        else:
            self.logger.debug(f"端点 {endpoint_key} 状态未变化: {current_status.value}")

        return transition

    def load_history(self) -> Dict[str, HistoryRecord]:
        """加载状态历史

        文件不存在或内容损坏时返回空映射，作为新的基线

        Returns:
            端点名称到历史记录的映射
        """
        try:
            return self._read_history_file()
        except StateManagerError as e:
            self.logger.warning(f"{e.format_error()}，将以空历史重新开始")
            return {}

    def save_history(self, history: Dict[str, HistoryRecord]):
        """保存状态历史到文件

        Args:
            history: 端点名称到历史记录的映射
        """
        try:
            # 确保目录存在
            Path(self.persistence_file).parent.mkdir(parents=True, exist_ok=True)

            data = {key: record.to_dict() for key, record in history.items()}
            with open(self.persistence_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)

        except OSError as e:
            self.logger.error(f"保存状态历史失败 {self.persistence_file}: {e}")

    def _read_history_file(self) -> Dict[str, HistoryRecord]:
        if not os.path.exists(self.persistence_file):
            return {}

        try:
            with open(self.persistence_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StateManagerError(
                f"无法读取状态历史文件 {self.persistence_file}",
                ErrorCode.STATE_PERSISTENCE_ERROR,
                cause=e
            )

        if not isinstance(data, dict):
            raise StateManagerError(
                f"状态历史文件格式无效 {self.persistence_file}",
                ErrorCode.STATE_PERSISTENCE_ERROR
            )

        history = {}
        for key, value in data.items():
            if not isinstance(value, dict):
                self.logger.warning(f"忽略无效的历史记录: {key}")
                continue
            try:
                history[key] = HistoryRecord.from_dict(value)
            except (TypeError, ValueError) as e:
                self.logger.warning(f"忽略无效的历史记录 {key}: {e}")

        return history
