"""日志初始化

控制台输出带颜色的简要日志；文件输出按来源拆分：
studio.toolcalling.<tool> 下的日志写入 <tool>.log，其余写入主日志文件。
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Optional

from studio.core.config import settings

TOOL_LOGGER_PREFIX = 'studio.toolcalling.'
SHARED_TOOL_PACKAGES = {'common'}

CONSOLE_FORMAT = '%(asctime)s | %(process)d | %(levelname)-8s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(process)d | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s'

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

# 只保留警告以上，降低噪音
QUIET_LOGGERS = ('httpx', 'httpcore', 'openai', 'asyncio', 'uvicorn.access', 'redis', 'opentelemetry')


class ColoredFormatter(logging.Formatter):
    """控制台格式化器，按级别给级别名着色"""

    RESET = '\033[0m'
    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }

    def format(self, record: logging.LogRecord) -> str:
        # 在副本上着色，文件日志里不能出现控制符
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


class ToolLoggingHandler(logging.Handler):
    """按工具拆分日志文件的处理器

    每个目标文件对应一个 RotatingFileHandler，首次写入时创建。
    """

    MAIN = '__main__'

    def __init__(self, log_dir: str, main_log_file: str, max_bytes: int = MAX_BYTES, backup_count: int = BACKUP_COUNT):
        super().__init__()
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._file_handlers: Dict[str, logging.Handler] = {self.MAIN: self._open(main_log_file)}

    def _open(self, file_name: str) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            self.log_dir / file_name,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        return handler

    @staticmethod
    def get_tool_name_from_logger(logger_name: str) -> Optional[str]:
        """'studio.toolcalling.dockerhub.service' -> 'dockerhub'

        公共包和非工具模块返回 None。
        """
        if not logger_name.startswith(TOOL_LOGGER_PREFIX):
            return None
        tool = logger_name[len(TOOL_LOGGER_PREFIX):].split('.', 1)[0]
        if not tool or tool in SHARED_TOOL_PACKAGES:
            return None
        return tool

    def target_for(self, logger_name: str) -> logging.Handler:
        tool = self.get_tool_name_from_logger(logger_name)
        if tool is None:
            return self._file_handlers[self.MAIN]
        if tool not in self._file_handlers:
            self._file_handlers[tool] = self._open(f"{tool}.log")
        return self._file_handlers[tool]

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.target_for(record.name).emit(record)
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        for handler in self._file_handlers.values():
            handler.close()
        super().close()


def setup_logging(
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None,
    log_file: Optional[str] = None,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> None:
    """替换根日志记录器上的处理器

    未传入的参数取 settings 中的 log_* 配置。
    """
    level_name = (log_level or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.root
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if log_to_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
        root.addHandler(console)

    if log_to_file:
        log_dir = log_dir or settings.log_dir
        log_file = log_file or settings.log_file
        files = ToolLoggingHandler(log_dir, log_file)
        files.setLevel(level)
        root.addHandler(files)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"日志级别: {level_name}")
    if log_to_file:
        logger.info(f"日志目录: {log_dir}，主日志 {log_file}，工具日志 <tool>.log")


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or 'studio')


def init_logging() -> None:
    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        log_file=settings.log_file,
        log_to_file=settings.log_to_file,
        log_to_console=settings.log_to_console,
    )
