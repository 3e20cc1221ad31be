"""检查执行器

按配置顺序逐个检查端点：读取 -> 分类 -> 状态变化检测 -> 通知决策 -> 发送。
端点之间串行执行，并插入固定延迟避免短时间内集中调用 webhook。
"""

import asyncio
from typing import Any, Dict, List, Optional

from .classifier import classify
from .state_manager import StateManager
from ..alerts.base import BaseAlerter
from ..alerts.builder import build_message, build_summary, build_test_message, should_notify
from ..models.config import NotifierConfig, SiteCheck
from ..models.status import (
    CheckMetrics, CheckOutcome, Endpoint, HealthState, StructuredRecord
)
from ..readers import metrics_from_signal, read_signal
from ..utils.error_handler import ErrorHandler
from ..utils.exceptions import StatusSourceError
from ..utils.log_manager import get_logger


class CheckRunner:
    """检查执行器

    单个端点的失败只会被记录，不会中断整批检查
    """

    def __init__(self, config: NotifierConfig, alerter: BaseAlerter,
                 error_handler: Optional[ErrorHandler] = None):
        """初始化检查执行器

        Args:
            config: 运行配置
            alerter: 通知发送器
            error_handler: 错误处理器，默认新建
        """
        self.config = config
        self.alerter = alerter
        self.error_handler = error_handler or ErrorHandler()
        self.logger = get_logger('check_runner')
        self._state_managers: Dict[str, StateManager] = {}

        self.error_handler.register_recovery_handler(StatusSourceError, self._skip_endpoint)

    def get_state_manager(self, endpoint: Endpoint) -> StateManager:
        """获取端点对应历史文件的状态管理器"""
        history_file = self.config.history_file_for(endpoint)
        if history_file not in self._state_managers:
            self._state_managers[history_file] = StateManager(history_file)
        return self._state_managers[history_file]

    async def run(self) -> List[CheckOutcome]:
        """依次检查所有端点

        Returns:
            各端点的检查结果，顺序与配置一致
        """
        endpoints = self.config.endpoints
        self.logger.info(f"🚀 开始状态监控，共 {len(endpoints)} 个端点")
        self.logger.info(f"🔧 通知方式: {self.config.transport} ({self.config.webhook_type})")

        outcomes = []
        for index, endpoint in enumerate(endpoints):
            outcomes.append(await self.check_endpoint_safely(endpoint))

            if index < len(endpoints) - 1 and self.config.check_delay > 0:
                await asyncio.sleep(self.config.check_delay)

        stats = self.get_run_stats(outcomes)
        self.logger.info(
            f"🎉 监控检查完成: 检查 {stats['checked']} 个, 跳过 {stats['skipped']} 个, "
            f"通知 {stats['notified']} 个, 发送成功 {stats['sent']} 个"
        )
        return outcomes

    async def check_endpoint_safely(self, endpoint: Endpoint) -> CheckOutcome:
        """检查单个端点，异常转换为检查结果"""
        try:
            return await self.check_endpoint(endpoint)
        except Exception as e:
            outcome = self.error_handler.handle_error(
                e, {'endpoint': endpoint.name, 'endpoint_obj': endpoint})
            if outcome is None:
                outcome = CheckOutcome(endpoint=endpoint, error_message=str(e))
            return outcome

    async def check_endpoint(self, endpoint: Endpoint) -> CheckOutcome:
        """检查单个端点

        Args:
            endpoint: 被监控的端点

        Returns:
            CheckOutcome: 检查结果

        Raises:
            StatusSourceError: 数据文件缺失或无法解析
        """
        self.logger.info(f"🔍 检查 {endpoint.name}...")

        signal = read_signal(endpoint)
        status = classify(signal)
        metrics = metrics_from_signal(signal)

        self.logger.info(
            f"📊 {endpoint.name} 状态: {status.value}, "
            f"响应时间: {metrics.response_time}ms, 运行时间: {metrics.uptime}"
        )
        return await self.process_status(endpoint, status, metrics)

    async def check_site(self, site: SiteCheck) -> CheckOutcome:
        """处理由环境变量描述的单次检查

        Args:
            site: 单次检查描述

        Returns:
            CheckOutcome: 检查结果
        """
        endpoint = Endpoint(name=site.name, url=site.url, data_path='')
        status = classify(StructuredRecord(status=site.status))
        metrics = CheckMetrics(response_time=site.response_time,
                               uptime=site.uptime,
                               last_checked=site.last_checked)

        self.logger.info(f"开始检查状态变化: 网站={site.name}, 当前状态={status.value}, "
                         f"响应时间={site.response_time}ms")
        return await self.process_status(endpoint, status, metrics)

    async def process_status(self, endpoint: Endpoint, status: HealthState,
                             metrics: CheckMetrics) -> CheckOutcome:
        """检测状态变化并按需发送通知

        Args:
            endpoint: 被监控的端点
            status: 本次分类得到的状态
            metrics: 本次检查的展示指标

        Returns:
            CheckOutcome: 检查结果
        """
        state_manager = self.get_state_manager(endpoint)
        transition = state_manager.detect_change(endpoint.name, status, metrics)
        outcome = CheckOutcome(endpoint=endpoint, status=status,
                               metrics=metrics, transition=transition)

        notify_on_check = self.config.notify_on_check
        if not should_notify(transition, notify_on_check):
            self.logger.info(f"📊 {endpoint.name} 状态无变化且未启用每次检查通知，跳过通知")
            return outcome

        if not transition.changed:
            self.logger.info(f"📊 {endpoint.name} 状态无变化，但启用了每次检查通知")

        message = build_message(transition, endpoint, status, metrics, notify_on_check)
        if message is None:
            self.logger.warning(f"⚠️ {endpoint.name} 未生成有效通知消息，跳过通知")
            return outcome

        self.logger.info(f"📢 {endpoint.name} 准备发送 {message.kind.value} 通知...")
        outcome.notified = True
        outcome.sent = await self.alerter.send_alert(message)
        if not outcome.sent:
            outcome.error_message = '通知发送失败'
        return outcome

    async def send_summary(self, outcomes: List[CheckOutcome]) -> bool:
        """发送汇总报告

        Args:
            outcomes: 本轮检查结果

        Returns:
            bool: 发送是否成功
        """
        report = build_summary(outcomes)
        if report is None:
            self.logger.warning("⚠️ 没有可用的监控数据，跳过汇总报告")
            return False

        self.logger.info("📊 发送汇总报告...")
        return await self.alerter.send_summary(report)

    async def send_test_alert(self) -> bool:
        """向通知通道发送一条测试消息"""
        if self.config.endpoints:
            endpoint = self.config.endpoints[0]
        else:
            endpoint = Endpoint(name='测试站点', url='https://example.com', data_path='')
        return await self.alerter.send_alert(build_test_message(endpoint))

    async def close(self):
        """释放通知发送器资源"""
        await self.alerter.close()

    def get_run_stats(self, outcomes: List[CheckOutcome]) -> Dict[str, Any]:
        """统计一轮检查的结果"""
        return {
            'total': len(outcomes),
            'checked': sum(1 for o in outcomes if o.status is not None),
            'skipped': sum(1 for o in outcomes if o.skipped),
            'notified': sum(1 for o in outcomes if o.notified),
            'sent': sum(1 for o in outcomes if o.sent),
            'failed': sum(1 for o in outcomes if o.error_message and not o.skipped),
            'errors': self.error_handler.get_error_stats()
        }

    def _skip_endpoint(self, error: StatusSourceError, context: Dict[str, Any]) -> CheckOutcome:
        self.logger.warning(f"⚠️ {context['endpoint']} 数据不可用，跳过本轮检查")
        return CheckOutcome(endpoint=context['endpoint_obj'], skipped=True,
                            error_message=error.message)
