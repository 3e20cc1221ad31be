"""状态读取器测试"""

import json
import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
import yaml

from uptime_notifier.models.status import (
    BadgePair, Endpoint, SignalKind, StructuredRecord
)
from uptime_notifier.readers import (
    BadgeStatusReader, BaseStatusReader, RecordStatusReader, StatusReaderFactory,
    metrics_from_signal, parse_response_time, parse_uptime, read_signal,
    status_reader_factory
)
from uptime_notifier.utils.exceptions import ErrorCode, StatusSourceError


def write_badge(directory, file_name, message, color, **extra):
    data = {'schemaVersion': 1, 'label': file_name, 'message': message, 'color': color}
    data.update(extra)
    with open(os.path.join(directory, file_name), 'w', encoding='utf-8') as f:
        json.dump(data, f)


class TestBadgeParsing:
    """徽章文本解析测试"""

    def test_parse_response_time(self):
        assert parse_response_time('12737 ms') == '12737'
        assert parse_response_time('350ms') == '350'
        assert parse_response_time('') == '0'
        assert parse_response_time(None) == '0'

    def test_parse_uptime(self):
        assert parse_uptime('99.03%') == 99.03
        assert parse_uptime('100%') == 100.0
        assert parse_uptime('n/a') is None
        assert parse_uptime(None) is None


class TestBadgeStatusReader:
    """徽章文件读取器测试"""

    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.endpoint = Endpoint(name='api', url='https://api.example.com',
                                 data_path=self.temp_dir.name)

    def teardown_method(self):
        self.temp_dir.cleanup()

    def test_read_badges(self):
        """测试读取两个徽章文件"""
        write_badge(self.temp_dir.name, 'response-time.json', '12737 ms', 'red')
        write_badge(self.temp_dir.name, 'uptime.json', '99.03%', 'BrightGreen')

        signal = read_signal(self.endpoint)

        assert isinstance(signal, BadgePair)
        assert signal.response_time_message == '12737 ms'
        assert signal.response_time_color == 'red'
        assert signal.uptime_message == '99.03%'
        assert signal.uptime_color == 'brightgreen'
        assert signal.explicit_status is None

    def test_explicit_status_prefers_response_time_badge(self):
        """测试响应时间徽章上的 status 优先"""
        write_badge(self.temp_dir.name, 'response-time.json', '200 ms', 'green', status='slow')
        write_badge(self.temp_dir.name, 'uptime.json', '100%', 'green', status='up')

        signal = read_signal(self.endpoint)
        assert signal.explicit_status == 'slow'

    def test_explicit_status_from_uptime_badge(self):
        write_badge(self.temp_dir.name, 'response-time.json', '200 ms', 'green')
        write_badge(self.temp_dir.name, 'uptime.json', '10%', 'red', status='down')

        assert read_signal(self.endpoint).explicit_status == 'down'

    def test_missing_badge_file(self):
        """测试徽章文件缺失"""
        write_badge(self.temp_dir.name, 'response-time.json', '200 ms', 'green')

        with pytest.raises(StatusSourceError) as exc_info:
            read_signal(self.endpoint)

        assert exc_info.value.error_code == ErrorCode.STATUS_SOURCE_NOT_FOUND
        assert exc_info.value.details['endpoint_name'] == 'api'
        assert exc_info.value.details['file_path'].endswith('uptime.json')

    def test_malformed_badge_file(self):
        """测试徽章文件不是合法JSON"""
        with open(os.path.join(self.temp_dir.name, 'response-time.json'), 'w') as f:
            f.write('{not json')
        write_badge(self.temp_dir.name, 'uptime.json', '100%', 'green')

        with pytest.raises(StatusSourceError) as exc_info:
            read_signal(self.endpoint)

        assert exc_info.value.error_code == ErrorCode.STATUS_SOURCE_UNREADABLE

    def test_badge_without_message(self):
        """测试徽章缺少 message 字段"""
        with open(os.path.join(self.temp_dir.name, 'response-time.json'), 'w') as f:
            json.dump({'color': 'green'}, f)
        write_badge(self.temp_dir.name, 'uptime.json', '100%', 'green')

        with pytest.raises(StatusSourceError) as exc_info:
            read_signal(self.endpoint)

        assert exc_info.value.error_code == ErrorCode.STATUS_SOURCE_INVALID


class TestRecordStatusReader:
    """结构化记录读取器测试"""

    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def teardown_method(self):
        self.temp_dir.cleanup()

    def test_read_yaml_record(self):
        """测试读取 history/<slug>.yml 形式的记录"""
        record_file = os.path.join(self.temp_dir.name, 'our-api.yml')
        with open(record_file, 'w', encoding='utf-8') as f:
            yaml.dump({
                'url': 'https://api.example.com',
                'status': 'up',
                'code': 200,
                'responseTime': 350,
                'lastUpdated': '2024-05-01T08:30:00.000Z',
                'startTime': '2021-01-01T00:00:00.000Z'
            }, f)

        endpoint = Endpoint(name='our-api', url='https://api.example.com',
                            data_path=record_file, source=SignalKind.RECORD)
        signal = read_signal(endpoint)

        assert isinstance(signal, StructuredRecord)
        assert signal.status == 'up'
        assert signal.code == 200
        assert signal.response_time_ms == 350.0
        assert signal.last_updated == '2024-05-01T08:30:00.000Z'

    def test_read_status_json_in_directory(self):
        """测试 data_path 为目录时读取 status.json"""
        with open(os.path.join(self.temp_dir.name, 'status.json'), 'w') as f:
            json.dump({'code': 503, 'responseTime': 'n/a'}, f)

        endpoint = Endpoint(name='web', url='https://web.example.com',
                            data_path=self.temp_dir.name, source=SignalKind.RECORD)
        reader = RecordStatusReader(endpoint)

        assert reader.get_record_file().endswith('status.json')
        signal = reader.read_signal()
        assert signal.status is None
        assert signal.code == 503
        assert signal.response_time_ms is None

    def test_read_non_finite_values(self):
        """测试 .inf / .nan 数值按缺失处理"""
        record_file = os.path.join(self.temp_dir.name, 'our-api.yml')
        with open(record_file, 'w', encoding='utf-8') as f:
            f.write('status: up\ncode: .inf\nresponseTime: .nan\n')

        endpoint = Endpoint(name='our-api', url='', data_path=record_file,
                            source=SignalKind.RECORD)
        signal = read_signal(endpoint)

        assert signal.code is None
        assert signal.response_time_ms is None
        assert metrics_from_signal(signal).response_time == '未知'

    def test_record_must_be_mapping(self):
        record_file = os.path.join(self.temp_dir.name, 'status.json')
        with open(record_file, 'w') as f:
            json.dump(['up'], f)

        endpoint = Endpoint(name='web', url='', data_path=record_file,
                            source=SignalKind.RECORD)

        with pytest.raises(StatusSourceError) as exc_info:
            read_signal(endpoint)

        assert exc_info.value.error_code == ErrorCode.STATUS_SOURCE_INVALID


class TestMetricsFromSignal:
    """展示指标测试"""

    def test_badge_metrics(self):
        checked_at = datetime(2024, 1, 1, 12, 0, 0)
        badges = BadgePair('12737 ms', 'red', '99.03%', 'brightgreen')

        metrics = metrics_from_signal(badges, checked_at)

        assert metrics.response_time == '12737'
        assert metrics.uptime == '99.03%'
        assert metrics.last_checked == checked_at

    def test_record_metrics(self):
        metrics = metrics_from_signal(StructuredRecord(response_time_ms=350.7))
        assert metrics.response_time == '350'
        assert metrics.uptime == '未知'

    def test_record_metrics_without_response_time(self):
        metrics = metrics_from_signal(StructuredRecord(status='down'))
        assert metrics.response_time == '未知'

    @pytest.mark.parametrize('value', [float('inf'), float('nan')])
    def test_record_metrics_non_finite_response_time(self, value):
        metrics = metrics_from_signal(StructuredRecord(status='up', response_time_ms=value))
        assert metrics.response_time == '未知'

    def test_default_check_time_is_utc(self):
        """测试默认检查时间带有 UTC 时区"""
        metrics = metrics_from_signal(BadgePair('200 ms', 'brightgreen', '99%', 'brightgreen'))

        assert metrics.last_checked.utcoffset() == timedelta(0)
        assert abs(datetime.now(timezone.utc) - metrics.last_checked) < timedelta(seconds=5)


class TestStatusReaderFactory:
    """读取器工厂测试"""

    def test_supported_sources(self):
        assert set(status_reader_factory.get_supported_sources()) == {'badge', 'record'}

    def test_create_reader(self):
        endpoint = Endpoint(name='api', url='', data_path='api')
        assert isinstance(status_reader_factory.create_reader(endpoint), BadgeStatusReader)

    def test_unregistered_source(self):
        """测试未注册的数据源类型"""
        factory = StatusReaderFactory()
        endpoint = Endpoint(name='api', url='', data_path='api')

        with pytest.raises(StatusSourceError):
            factory.create_reader(endpoint)

    def test_register_duplicate_reader(self):
        factory = StatusReaderFactory()
        factory.register_reader(SignalKind.BADGE, BadgeStatusReader)

        with pytest.raises(ValueError):
            factory.register_reader(SignalKind.BADGE, BadgeStatusReader)

    def test_register_invalid_reader(self):
        factory = StatusReaderFactory()

        with pytest.raises(ValueError):
            factory.register_reader(SignalKind.RECORD, dict)

    def test_base_reader_is_abstract(self):
        with pytest.raises(TypeError):
            BaseStatusReader(Endpoint(name='api', url='', data_path='api'))
