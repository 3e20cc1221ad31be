#!/usr/bin/env python3
"""
Upptime 状态通知程序入口

读取 Upptime 生成的状态数据，检测端点状态变化，
并通过 Slack / Discord / 自定义 webhook 或 Discord Bot 发送通知。
"""

import argparse
import asyncio
import dataclasses
import os
import sys
from typing import Mapping, Optional

from uptime_notifier.alerts.factory import create_alerter
from uptime_notifier.models.config import NotifierConfig, SiteCheck
from uptime_notifier.readers import status_reader_factory
from uptime_notifier.services.check_runner import CheckRunner
from uptime_notifier.services.config_manager import ConfigManager
from uptime_notifier.utils.exceptions import ConfigError, NotifierError
from uptime_notifier.utils.log_manager import log_manager, get_logger

# 版本信息
__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog='uptime-notifier',
        description='Upptime 状态通知 - 检测端点状态变化并发送 webhook / Discord 通知',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例用法:
  %(prog)s config.yaml                    # 检查所有端点并按需发送通知
  %(prog)s --report config.yaml          # 检查后额外发送汇总报告
  %(prog)s --validate config.yaml        # 验证配置文件格式
  %(prog)s --test-alerts config.yaml     # 向通知通道发送测试消息
  %(prog)s --from-env                     # 根据环境变量发送单次通知
  %(prog)s --version                      # 显示版本信息

支持的通知方式:
  - Slack webhook
  - Discord webhook
  - 自定义 webhook
  - Discord Bot

配置文件格式请参考 config.example.yaml
        """
    )

    # 位置参数：配置文件路径
    parser.add_argument(
        'config_file',
        nargs='?',
        help='YAML配置文件路径'
    )

    parser.add_argument(
        '--version', '-v',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--validate',
        action='store_true',
        help='验证配置文件格式并退出'
    )

    parser.add_argument(
        '--test-alerts',
        action='store_true',
        help='发送测试通知并退出'
    )

    parser.add_argument(
        '--from-env',
        action='store_true',
        help='根据 SITE_* 等环境变量处理单个站点的检查结果'
    )

    parser.add_argument(
        '--report',
        action='store_true',
        help='检查完成后发送汇总报告'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='设置日志级别（覆盖配置文件设置）'
    )

    parser.add_argument(
        '--log-file',
        help='日志文件路径（覆盖配置文件设置）'
    )

    return parser


def apply_log_overrides(config: NotifierConfig, log_level: Optional[str] = None,
                        log_file: Optional[str] = None) -> NotifierConfig:
    """应用命令行日志参数并配置日志系统

    Args:
        config: 运行配置
        log_level: 日志级别
        log_file: 日志文件路径

    Returns:
        覆盖后的运行配置
    """
    overrides = {}
    if log_level:
        overrides['log_level'] = log_level
    if log_file:
        overrides['log_file'] = log_file
    if overrides:
        config = dataclasses.replace(config, **overrides)

    log_manager.configure(config.get_logging_config())
    return config


def load_runtime_config(config_path: str, log_level: Optional[str] = None,
                        log_file: Optional[str] = None) -> NotifierConfig:
    """加载配置文件并配置日志系统

    Raises:
        ConfigError: 配置加载或验证失败
    """
    config = ConfigManager(config_path).build_config()
    return apply_log_overrides(config, log_level, log_file)


def validate_config_file(config_path: str) -> bool:
    """验证配置文件

    Args:
        config_path: 配置文件路径

    Returns:
        验证是否成功
    """
    try:
        print(f"正在验证配置文件: {config_path}")

        if not os.path.exists(config_path):
            print(f"❌ 配置文件不存在: {config_path}")
            return False

        config = ConfigManager(config_path).build_config()

        print("✅ 配置文件验证成功!")
        print(f"   - 端点数量: {len(config.endpoints)}")
        if config.transport == 'bot':
            print(f"   - 通知方式: Discord Bot (频道: {config.channel_id})")
        else:
            print(f"   - 通知方式: {config.webhook_type} webhook")
        print(f"   - 状态历史文件: {config.status_history_file}")
        print(f"   - 支持的数据源: {', '.join(status_reader_factory.get_supported_sources())}")

        if config.endpoints:
            print("   - 配置的端点:")
            for endpoint in config.endpoints:
                print(f"     * {endpoint.name} ({endpoint.source.value}) -> {endpoint.data_path}")

        return True

    except Exception as e:
        print(f"❌ 配置文件验证失败: {e}")
        return False


async def run_alert_test(config_path: str, log_level: Optional[str] = None,
                         log_file: Optional[str] = None) -> bool:
    """向通知通道发送测试消息

    Args:
        config_path: 配置文件路径

    Returns:
        测试是否成功
    """
    try:
        print(f"正在测试通知通道: {config_path}")

        config = load_runtime_config(config_path, log_level, log_file)
        runner = CheckRunner(config, create_alerter(config))
        try:
            success = await runner.send_test_alert()
        finally:
            await runner.close()

        if success:
            print("✅ 通知通道测试成功!")
        else:
            print("❌ 通知通道测试失败!")

        return success

    except Exception as e:
        print(f"❌ 通知通道测试失败: {e}")
        return False


async def run_from_env(environ: Optional[Mapping[str, str]] = None,
                       log_level: Optional[str] = None,
                       log_file: Optional[str] = None) -> bool:
    """根据环境变量处理单个站点的检查结果

    Args:
        environ: 环境变量映射，默认使用 os.environ

    Returns:
        处理是否成功，通知发送失败时返回False

    Raises:
        ConfigError: 环境变量中的通知配置无效
    """
    config = apply_log_overrides(ConfigManager.from_env(environ), log_level, log_file)
    logger = get_logger('main')

    site = SiteCheck.from_env(environ)
    runner = CheckRunner(config, create_alerter(config))
    try:
        outcome = await runner.check_site(site)
    finally:
        await runner.close()

    if outcome.notified and not outcome.sent:
        logger.error(f"❌ {site.name} 通知发送失败")
        return False

    if outcome.notified:
        logger.info(f"✅ {site.name} 通知发送成功")
    return True


async def run_checks(config: NotifierConfig, send_report: bool = False) -> bool:
    """检查所有端点

    单个端点失败不影响整体结果，只有汇总报告发送失败时返回False

    Args:
        config: 运行配置
        send_report: 是否发送汇总报告

    Returns:
        运行是否成功
    """
    logger = get_logger('main')
    runner = CheckRunner(config, create_alerter(config))
    try:
        outcomes = await runner.run()

        for outcome in outcomes:
            if outcome.skipped:
                logger.warning(f"   ⏭️ {outcome.endpoint.name}: 已跳过 ({outcome.error_message})")
            elif outcome.status is None:
                logger.error(f"   ❌ {outcome.endpoint.name}: 检查失败 ({outcome.error_message})")

        if not send_report:
            return True
        if not runner.alerter.supports_summary:
            logger.warning("⚠️ 当前通知通道不支持汇总报告，跳过发送")
            return True
        return await runner.send_summary(outcomes)
    finally:
        await runner.close()


async def main():
    """主函数"""
    parser = create_argument_parser()
    args = parser.parse_args()

    if args.from_env:
        try:
            success = await run_from_env(log_level=args.log_level, log_file=args.log_file)
        except ConfigError as e:
            print(f"配置错误: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"未预期的错误: {e}", file=sys.stderr)
            sys.exit(1)
        finally:
            log_manager.cleanup()
        sys.exit(0 if success else 1)

    # 检查配置文件参数
    if not args.config_file:
        parser.print_help()
        sys.exit(1)

    config_path = args.config_file

    if not os.path.exists(config_path):
        print(f"配置文件不存在: {config_path}", file=sys.stderr)
        sys.exit(1)

    if args.validate:
        success = validate_config_file(config_path)
        sys.exit(0 if success else 1)

    if args.test_alerts:
        success = await run_alert_test(config_path, args.log_level, args.log_file)
        sys.exit(0 if success else 1)

    try:
        config = load_runtime_config(config_path, args.log_level, args.log_file)
        get_logger('main').info(f"Upptime 状态通知 v{__version__}，配置文件: {config_path}")
        success = await run_checks(config, send_report=args.report)
    except ConfigError as e:
        print(f"配置错误: {e}", file=sys.stderr)
        sys.exit(1)
    except NotifierError as e:
        print(f"状态通知错误: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"未预期的错误: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
    finally:
        log_manager.cleanup()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    # 设置事件循环策略（Windows兼容性）
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

    asyncio.run(main())
