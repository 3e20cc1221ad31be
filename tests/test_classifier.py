"""状态分类器测试"""

import pytest

from uptime_notifier.models.status import BadgePair, HealthState, StructuredRecord
from uptime_notifier.services.classifier import classify, classify_badges, classify_record


class TestClassifyBadges:
    """徽章分类测试"""

    def test_high_uptime_with_red_response_is_slow(self):
        """测试运行时间很高但响应时间变红时判定为缓慢"""
        badges = BadgePair('12737 ms', 'red', '99.03%', 'brightgreen')
        assert classify(badges) == HealthState.SLOW

    def test_red_uptime_is_down(self):
        """测试运行时间徽章变红时判定为异常"""
        badges = BadgePair('200 ms', 'brightgreen', '99.9%', 'red')
        assert classify(badges) == HealthState.DOWN

    def test_high_uptime_is_up(self):
        badges = BadgePair('180 ms', 'green', '100%', 'brightgreen')
        assert classify(badges) == HealthState.UP

    def test_low_uptime_with_red_response_is_down(self):
        badges = BadgePair('30000 ms', 'red', '80.5%', 'orange')
        assert classify(badges) == HealthState.DOWN

    @pytest.mark.parametrize('color', ['orange', 'yellow'])
    def test_low_uptime_with_warning_response_is_slow(self, color):
        badges = BadgePair('4000 ms', color, '90%', 'yellow')
        assert classify(badges) == HealthState.SLOW

    def test_unparseable_uptime_defaults_to_up(self):
        badges = BadgePair('200 ms', 'green', 'n/a', 'lightgrey')
        assert classify(badges) == HealthState.UP

    def test_explicit_status_wins(self):
        """测试明确的 status 字段优先于颜色判断"""
        badges = BadgePair('200 ms', 'green', '100%', 'brightgreen', explicit_status='down')
        assert classify(badges) == HealthState.DOWN

    def test_unrecognised_explicit_status_is_unknown(self):
        badges = BadgePair('200 ms', 'green', '100%', 'green', explicit_status='maintenance')
        assert classify_badges(badges) == HealthState.UNKNOWN


class TestClassifyRecord:
    """结构化记录分类测试"""

    def test_explicit_status(self):
        assert classify(StructuredRecord(status='slow', code=200)) == HealthState.SLOW
        assert classify(StructuredRecord(status='UP')) == HealthState.UP

    def test_degraded_status_is_slow(self):
        """测试 Upptime 的 degraded 状态按缓慢处理"""
        assert classify(StructuredRecord(status='degraded', code=200)) == HealthState.SLOW
        assert classify(StructuredRecord(status='Degraded')) == HealthState.SLOW

    @pytest.mark.parametrize('code,expected', [
        (200, HealthState.UP),
        (204, HealthState.UP),
        (404, HealthState.DOWN),
        (503, HealthState.DOWN),
    ])
    def test_http_code(self, code, expected):
        assert classify_record(StructuredRecord(code=code)) == expected

    def test_redirect_code_falls_through_to_response_time(self):
        """测试 3xx 状态码交给响应时间判断"""
        record = StructuredRecord(code=301, response_time_ms=15000)
        assert classify(record) == HealthState.SLOW

    def test_response_time(self):
        assert classify(StructuredRecord(response_time_ms=10001)) == HealthState.SLOW
        assert classify(StructuredRecord(response_time_ms=10000)) == HealthState.UP
        assert classify(StructuredRecord(response_time_ms=120)) == HealthState.UP

    def test_empty_record_defaults_to_up(self):
        assert classify(StructuredRecord()) == HealthState.UP


class TestClassify:
    """分类入口测试"""

    @pytest.mark.parametrize('signal', [
        BadgePair('12737 ms', 'red', '99.03%', 'brightgreen'),
        BadgePair('200 ms', 'green', '10%', 'red'),
        StructuredRecord(code=500),
        StructuredRecord(response_time_ms=20000),
    ])
    def test_idempotent(self, signal):
        """测试同一信号多次分类结果相同"""
        assert classify(signal) == classify(signal)

    def test_unsupported_signal(self):
        with pytest.raises(TypeError):
            classify({'status': 'up'})
