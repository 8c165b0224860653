"""日志配置"""
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "WARNING", verbose: bool = False) -> None:
    """在进程入口配置日志（输出到 stderr）

    Args:
        level: 日志级别名称
        verbose: 为 True 时强制 DEBUG
    """
    if verbose:
        level = "DEBUG"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
