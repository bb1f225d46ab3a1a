# workspace.py
"""
[V5.0] 工作区清理守卫
在任何有副作用的阶段开始前进入，无论以何种方式退出
(正常返回、任意阶段抛出的异常、SystemExit、Ctrl+C、SIGTERM) 都会删除工作区。
"""
import contextlib
import logging
import os
import shutil
import signal
import sys
from typing import Iterator

logger = logging.getLogger(__name__)


def remove_workspace(path: str) -> bool:
    """删除工作区目录，返回是否实际删除了内容"""
    logger.info("--- 🧹 正在清理 ---")
    if os.path.isdir(path):
        logger.info(f"正在删除克隆的仓库: {path}")
        shutil.rmtree(path, ignore_errors=True)
        if os.path.exists(path):
            logger.error(f"❌ 工作区未能完全删除: {path}")
            return False
        logger.info("✅ 清理完成。")
        return True
    logger.info("没有需要清理的仓库目录。")
    return False


def _raise_system_exit(signum, frame):
    # 把 SIGTERM 转为 SystemExit，使 finally 块得以执行
    sys.exit(128 + signum)


@contextlib.contextmanager
def workspace_guard(path: str) -> Iterator[str]:
    """
    作用域守卫：退出 with 块时无条件删除 path。
    清理逻辑不属于任何阶段的成功路径。
    """
    installed = False
    previous_handler = None
    try:
        previous_handler = signal.signal(signal.SIGTERM, _raise_system_exit)
        installed = True
    except ValueError:
        # 非主线程无法安装信号处理器
        pass

    try:
        yield path
    finally:
        try:
            remove_workspace(path)
        finally:
            if installed:
                signal.signal(signal.SIGTERM, previous_handler or signal.SIG_DFL)
