"""错误处理器"""

from typing import Any, Callable, Dict, Optional

from .exceptions import NotifierError
from .log_manager import get_logger

logger = get_logger('error_handler')


class ErrorHandler:
    """统一错误处理器

    记录错误统计并格式化日志，不做任何重试
    """

    def __init__(self):
        self.error_stats: Dict[str, int] = {}
        self.recovery_handlers: Dict[type, Callable] = {}

    def register_recovery_handler(self, error_type: type, handler: Callable):
        """注册错误恢复处理器"""
        self.recovery_handlers[error_type] = handler
        logger.debug(f"注册错误恢复处理器: {error_type.__name__}")

    def handle_error(
            self,
            error: Exception,
            context: Optional[Dict[str, Any]] = None
    ) -> Optional[Any]:
        """处理错误并尝试恢复

        Args:
            error: 捕获到的异常
            context: 错误上下文，例如端点名称

        Returns:
            恢复处理器的返回值，没有匹配的处理器时返回None
        """
        context = context or {}

        error_type = type(error).__name__
        self.error_stats[error_type] = self.error_stats.get(error_type, 0) + 1

        where = f" [{context['endpoint']}]" if 'endpoint' in context else ''
        if isinstance(error, NotifierError):
            logger.error(f"处理系统错误{where}: {error.format_error()}")
        else:
            logger.error(f"处理未知错误{where}: {error}", exc_info=True)

        for registered_type, handler in self.recovery_handlers.items():
            if isinstance(error, registered_type):
                try:
                    logger.info(f"尝试使用恢复处理器: {registered_type.__name__}")
                    return handler(error, context)
                except Exception as recovery_error:
                    logger.error(f"错误恢复失败: {recovery_error}", exc_info=True)

        return None

    def get_error_stats(self) -> Dict[str, int]:
        """获取错误统计信息"""
        return self.error_stats.copy()
