from __future__ import annotations

import logging
from typing import Optional

from combine_tool.config import LOG_CONFIG


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """设置日志系统：控制台输出，可选追加 UTF-8 日志文件。

    Parameters
    ----------
    level : Optional[str]
        Level name such as 'INFO'; defaults to LOG_CONFIG['level'].
    log_file : Optional[str]
        Extra log file; defaults to LOG_CONFIG['file'].
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = log_file or LOG_CONFIG["file"]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding=LOG_CONFIG["encoding"]))
    logging.basicConfig(
        level=(level or LOG_CONFIG["level"]).upper(),
        format=LOG_CONFIG["format"],
        handlers=handlers,
        force=True,
    )
