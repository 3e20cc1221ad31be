"""CLI接口功能测试"""

import dataclasses
import json
import os
import tempfile
from unittest.mock import AsyncMock, patch

import pytest
import yaml

from main import (
    create_argument_parser,
    validate_config_file,
    run_alert_test,
    run_from_env,
    run_checks,
    load_runtime_config,
    main,
    __version__
)
from uptime_notifier.utils.log_manager import log_manager


class TestArgumentParser:
    """命令行参数解析器测试"""

    def test_create_argument_parser(self):
        """测试创建参数解析器"""
        parser = create_argument_parser()

        assert parser.prog == 'uptime-notifier'
        assert 'Upptime' in parser.description

    def test_parse_basic_args(self):
        """测试解析基本参数"""
        parser = create_argument_parser()

        args = parser.parse_args(['config.yaml'])
        assert args.config_file == 'config.yaml'
        assert not args.validate
        assert not args.test_alerts
        assert not args.from_env
        assert not args.report

    def test_parse_flags(self):
        parser = create_argument_parser()

        args = parser.parse_args(['--validate', '--report', '--log-level', 'DEBUG',
                                  '--log-file', '/tmp/notifier.log', 'config.yaml'])
        assert args.validate
        assert args.report
        assert args.log_level == 'DEBUG'
        assert args.log_file == '/tmp/notifier.log'

    def test_parse_from_env_without_config(self):
        """测试单次通知模式不需要配置文件"""
        args = create_argument_parser().parse_args(['--from-env'])

        assert args.from_env
        assert args.config_file is None

    def test_version_argument(self):
        """测试版本参数"""
        parser = create_argument_parser()

        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(['--version'])

        assert exc_info.value.code == 0
        assert __version__ == "1.0.0"


class TestConfigCommands:
    """配置相关命令测试"""

    @pytest.fixture
    def workspace(self):
        """创建带徽章数据的临时目录和配置文件"""
        with tempfile.TemporaryDirectory() as temp_dir:
            data_path = os.path.join(temp_dir, 'api', 'our-api')
            os.makedirs(data_path)
            for file_name, message, color in (('response-time.json', '200 ms', 'green'),
                                              ('uptime.json', '100%', 'brightgreen')):
                with open(os.path.join(data_path, file_name), 'w') as f:
                    json.dump({'schemaVersion': 1, 'message': message, 'color': color}, f)

            config_data = {
                'global': {
                    'log_level': 'INFO',
                    'check_delay': 0,
                    'status_history_file': os.path.join(temp_dir, 'status-history.json')
                },
                'notification': {
                    'webhook_url': 'https://discord.com/api/webhooks/1/x',
                    'webhook_type': 'discord'
                },
                'endpoints': {
                    'our_api': {
                        'url': 'https://api.example.com',
                        'data_path': data_path
                    }
                }
            }
            config_file = os.path.join(temp_dir, 'config.yaml')
            with open(config_file, 'w') as f:
                yaml.dump(config_data, f, default_flow_style=False)

            yield temp_dir, config_file

    def test_validate_valid_config(self, workspace, capsys):
        """测试验证有效配置文件"""
        _, config_file = workspace

        assert validate_config_file(config_file) is True
        out = capsys.readouterr().out
        assert '配置文件验证成功' in out
        assert '支持的数据源: badge, record' in out

    def test_validate_missing_config(self):
        assert validate_config_file('/nonexistent/config.yaml') is False

    def test_validate_invalid_config(self, workspace):
        temp_dir, _ = workspace
        invalid_file = os.path.join(temp_dir, 'invalid.yaml')
        with open(invalid_file, 'w') as f:
            yaml.dump({'endpoints': {}}, f)

        assert validate_config_file(invalid_file) is False

    def test_load_runtime_config_overrides(self, workspace):
        """测试命令行日志参数覆盖配置文件"""
        temp_dir, config_file = workspace
        log_file = os.path.join(temp_dir, 'logs', 'notifier.log')

        config = load_runtime_config(config_file, 'DEBUG', log_file)

        assert config.log_level == 'DEBUG'
        assert config.log_file == log_file

        log_manager.configure({'log_level': 'INFO', 'enable_file': False})

    @pytest.mark.asyncio
    async def test_run_checks(self, workspace):
        """测试完整运行一次检查"""
        temp_dir, config_file = workspace
        config = load_runtime_config(config_file)

        with patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                   new_callable=AsyncMock, return_value=True) as mock_send:
            assert await run_checks(config) is True

        mock_send.assert_awaited_once()
        with open(os.path.join(temp_dir, 'status-history.json')) as f:
            assert json.load(f)['our_api']['status'] == 'up'

    @pytest.mark.asyncio
    async def test_run_checks_with_report(self, workspace):
        _, config_file = workspace
        config = load_runtime_config(config_file)

        with patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                   new_callable=AsyncMock, return_value=True) as mock_send:
            assert await run_checks(config, send_report=True) is True

        assert mock_send.await_count == 2

    @pytest.mark.asyncio
    async def test_run_checks_report_unsupported_webhook(self, workspace):
        """测试不支持汇总报告的 webhook 类型跳过报告且不算失败"""
        _, config_file = workspace
        config = dataclasses.replace(load_runtime_config(config_file),
                                     webhook_url='https://hooks.example.com/notify',
                                     webhook_type='custom')

        with patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                   new_callable=AsyncMock, return_value=True) as mock_send:
            assert await run_checks(config, send_report=True) is True

        mock_send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_alert_test(self, workspace):
        """测试通知通道测试命令"""
        _, config_file = workspace

        with patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                   new_callable=AsyncMock, return_value=False):
            assert await run_alert_test(config_file) is False

        with patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                   new_callable=AsyncMock, return_value=True):
            assert await run_alert_test(config_file) is True

    @pytest.mark.asyncio
    async def test_main_validate(self, workspace):
        _, config_file = workspace

        with patch('sys.argv', ['uptime-notifier', '--validate', config_file]):
            with pytest.raises(SystemExit) as exc_info:
                await main()

        assert exc_info.value.code == 0

    @pytest.mark.asyncio
    async def test_main_missing_config(self):
        """测试配置文件不存在时退出码为1"""
        with patch('sys.argv', ['uptime-notifier', '/nonexistent/config.yaml']):
            with pytest.raises(SystemExit) as exc_info:
                await main()

        assert exc_info.value.code == 1


class TestFromEnv:
    """单次通知模式测试"""

    @pytest.fixture
    def environ(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            yield {
                'SITE_NAME': 'Our API',
                'SITE_URL': 'https://api.example.com',
                'SITE_STATUS': 'down',
                'RESPONSE_TIME': '0',
                'UPTIME': '95.5%',
                'WEBHOOK_URL': 'https://hooks.example.com/notify',
                'WEBHOOK_TYPE': 'custom',
                'STATUS_HISTORY_FILE': os.path.join(temp_dir, 'status-history.json')
            }

    @pytest.mark.asyncio
    async def test_run_from_env(self, environ):
        """测试根据环境变量发送通知"""
        with patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                   new_callable=AsyncMock, return_value=True) as mock_send:
            assert await run_from_env(environ) is True

        payload = mock_send.call_args[0][0]
        assert payload['site']['name'] == 'Our API'
        assert payload['site']['status'] == 'down'
        assert os.path.exists(environ['STATUS_HISTORY_FILE'])

    @pytest.mark.asyncio
    async def test_run_from_env_unchanged(self, environ):
        """测试第二次相同状态不再发送"""
        with patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                   new_callable=AsyncMock, return_value=True) as mock_send:
            await run_from_env(environ)
            assert await run_from_env(environ) is True

        assert mock_send.await_count == 1

    @pytest.mark.asyncio
    async def test_run_from_env_send_failure(self, environ):
        with patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                   new_callable=AsyncMock, return_value=False):
            assert await run_from_env(environ) is False

    @pytest.mark.asyncio
    async def test_main_from_env_cleans_up_logging(self, environ):
        """测试单次通知模式退出前释放日志资源"""
        with patch.dict(os.environ, environ), \
                patch('sys.argv', ['uptime-notifier', '--from-env']), \
                patch('uptime_notifier.alerts.webhook_alerter.WebhookAlerter._send_request',
                      new_callable=AsyncMock, return_value=True), \
                patch.object(log_manager, 'cleanup') as mock_cleanup:
            with pytest.raises(SystemExit) as exc_info:
                await main()

        assert exc_info.value.code == 0
        mock_cleanup.assert_called_once()
