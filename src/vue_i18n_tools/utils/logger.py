"""
Unified logging system for the Vue i18n extraction tools.

Provides:
- Structured logging with levels (DEBUG, INFO, WARNING, ERROR)
- Rich console output and optional file output
- Performance timing and progress helpers
- Custom exception hierarchy
"""

from __future__ import annotations

import functools
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

_console = Console()

# 类型变量用于装饰器
F = TypeVar('F', bound=Callable[..., Any])


# ========================================
# 自定义异常层次结构
# ========================================

class I18nToolsError(Exception):
    """i18n 提取工具基础异常"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class FileOperationError(I18nToolsError):
    """文件操作错误（读取、写入、编码等）"""

    def __init__(self, message: str, file_path: Optional[Path] = None, **kwargs):
        details = {"file_path": str(file_path) if file_path else None, **kwargs}
        super().__init__(message, details)
        self.file_path = file_path


class ParseError(I18nToolsError):
    """源码解析错误"""

    def __init__(self, message: str, source_name: Optional[str] = None, offset: Optional[int] = None, **kwargs):
        details = {"source_name": source_name, "offset": offset, **kwargs}
        super().__init__(message, details)
        self.source_name = source_name
        self.offset = offset


class MalformedStructureError(I18nToolsError):
    """节点缺少预期结构，放弃本次改写"""

    def __init__(self, message: str, handle: Optional[int] = None, **kwargs):
        details = {"handle": handle, **kwargs}
        super().__init__(message, details)
        self.handle = handle


# ========================================
# 日志类
# ========================================


class ExtractorLogger:
    """Logger wrapper with convenience methods."""

    def __init__(
        self,
        name: str = "vue_i18n_tools",
        level: int = logging.INFO,
        log_file: Optional[Path] = None,
    ):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path for log output
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.handlers = []  # Clear existing handlers

        console_handler = RichHandler(
            console=_console,
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=False
        )
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            self.logger.addHandler(file_handler)

    def debug(self, msg: str, *args, **kwargs):
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        """Log exception with traceback."""
        self.logger.exception(msg, *args, **kwargs)

    @contextmanager
    def timer(self, operation: str, level: int = logging.INFO):
        """
        Context manager for timing operations.

        Usage:
            with logger.timer("Extracting"):
                ...
        """
        start = time.time()
        self.logger.log(level, f"Starting: {operation}")
        try:
            yield
        finally:
            elapsed = time.time() - start
            self.logger.log(level, f"Completed: {operation} (took {elapsed:.2f}s)")

    @contextmanager
    def progress(
        self,
        total: int,
        description: str = "Processing",
        disable: bool = False
    ):
        """
        Context manager for progress tracking with Rich.

        Usage:
            with logger.progress(len(files), "Extracting") as update:
                for f in files:
                    update(1)
        """
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=_console,
            disable=disable,
        ) as progress:
            task = progress.add_task(description, total=total)

            def update(advance: int = 1):
                progress.update(task, advance=advance)

            yield update


def log_exceptions(
    logger_instance: Optional[ExtractorLogger] = None,
    reraise: bool = True,
    default_return: Any = None
) -> Callable[[F], F]:
    """
    装饰器：自动记录函数异常

    Usage:
        @log_exceptions(reraise=False)
        def risky_function():
            ...
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            log = logger_instance or get_logger()
            try:
                return func(*args, **kwargs)
            except I18nToolsError as e:
                log.error(f"{func.__name__} failed: {e}")
                if reraise:
                    raise
                return default_return
            except Exception as e:
                log.exception(f"{func.__name__} unexpected error: {e}")
                if reraise:
                    raise
                return default_return
        return wrapper  # type: ignore
    return decorator


# Global logger instance
_default_logger: Optional[ExtractorLogger] = None


def get_logger(
    name: str = "vue_i18n_tools",
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
) -> ExtractorLogger:
    """
    Get or create global logger instance.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional log file path

    Returns:
        ExtractorLogger instance
    """
    global _default_logger
    if _default_logger is None:
        _default_logger = ExtractorLogger(name=name, level=level, log_file=log_file)
    return _default_logger


def setup_logger(
    name: str = "vue_i18n_tools",
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
) -> ExtractorLogger:
    """Setup and configure global logger, replacing any previous one."""
    global _default_logger
    _default_logger = ExtractorLogger(name=name, level=level, log_file=log_file)
    return _default_logger
