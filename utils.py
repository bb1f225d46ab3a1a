import logging
import sys


# 将日志配置移到这里，作为一个可被调用的函数
def setup_logging(level: str = "INFO"):
    """配置全局日志"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )