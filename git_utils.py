import logging
import os
import subprocess
from typing import List, Optional

from context import RunContext
from errors import AcquisitionError

logger = logging.getLogger(__name__)


def build_clone_url(owner: str, repo_name: str, token: str, host: str = "github.com") -> str:
    """(V5.0) 构建内嵌 token 的 HTTPS 克隆地址"""
    return f"https://oauth2:{token}@{host}/{owner}/{repo_name}"


def mask_token(text: str, token: Optional[str]) -> str:
    """把文本中的 token 替换为 ***，用于日志与异常信息"""
    if not text or not token:
        return text
    return text.replace(token, "***")


def run_git_command(
    args: List[str], cwd: Optional[str] = None, secret: Optional[str] = None
) -> subprocess.CompletedProcess:
    """
    (V5.0) 统一的 Git 命令执行函数
    - 不设置超时 (克隆大仓库可能耗时很久)
    - 输出直接透传到终端，便于观察 --progress
    - 失败时抛出 AcquisitionError，信息中的 token 已脱敏
    """
    cmd = ["git", *args]
    display_cmd = mask_token(" ".join(cmd), secret)
    logger.info(f"执行命令: {display_cmd}")
    try:
        result = subprocess.run(cmd, cwd=cwd, check=False)
    except FileNotFoundError as e:
        raise AcquisitionError("未在 PATH 中找到 git 可执行文件") from e
    except OSError as e:
        raise AcquisitionError(mask_token(f"执行 Git 命令出错: {e}", secret)) from e

    if result.returncode != 0:
        raise AcquisitionError(
            f"Git 命令失败 (退出码 {result.returncode}): {display_cmd}"
        )
    return result


def is_git_repository(repo_path: str) -> bool:
    """检查指定路径是否为Git仓库"""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            capture_output=True,
            text=True,
            cwd=repo_path,
        )
        return result.returncode == 0
    except OSError:
        return False


def clone_repository(context: RunContext) -> bool:
    """
    (V5.0) 幂等地把目标仓库克隆到工作区。
    - 工作区已存在：跳过克隆，直接复用 (上一次运行被外部中断时的情形)
    - 否则克隆默认分支
    返回是否实际执行了克隆。
    """
    token = context.global_config.credentials.github_token
    if not token:
        raise AcquisitionError("缺少 GITHUB_TOKEN，无法构建克隆地址")

    logger.info("=" * 50)
    logger.info(f"🚀 步骤 1: 处理仓库 {context.owner}/{context.repo_name}")
    logger.info("=" * 50)

    os.makedirs(os.path.dirname(context.clone_path), exist_ok=True)

    if os.path.exists(context.clone_path):
        logger.info(f"ℹ️ 仓库已存在于 {context.clone_path}，跳过克隆。")
        if not is_git_repository(context.clone_path):
            logger.warning(f"⚠️ {context.clone_path} 不是 Git 仓库，仍按现有内容继续。")
        return False

    logger.info("正在克隆默认分支...")
    clone_url = build_clone_url(
        context.owner,
        context.repo_name,
        token,
        host=context.global_config.github_host,
    )
    run_git_command(
        ["clone", "--progress", clone_url, context.clone_path],
        secret=token,
    )
    logger.info(f"✅ 克隆完成: {context.clone_path}")
    return True
