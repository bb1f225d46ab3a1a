# context.py
"""
[V5.0] 运行时配置的数据模型
"""
import os
import re
from dataclasses import dataclass

from config import GlobalConfig
from errors import UsageError

# 仓库名只允许 GitHub 合法字符，防止路径穿越或 URL 注入
_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


@dataclass(frozen=True)
class RunContext:
    """
    (V5.0) 封装一次运行所需的所有配置和状态。
    由 cli 构建一次，之后不可修改，按引用传递给每个阶段。
    """

    # --- 目标仓库 ---
    repo_name: str
    owner: str

    # --- 核心路径 ---
    clone_path: str
    output_path: str

    # --- 全局配置 ---
    # 包含所有 API 密钥、常量和 .env 加载的数据
    global_config: GlobalConfig

    @property
    def output_filename(self) -> str:
        return os.path.basename(self.output_path)


def validate_repo_name(repo_name: str) -> str:
    """校验仓库名，非法时抛出 UsageError"""
    name = (repo_name or "").strip()
    if not name:
        raise UsageError("必须提供仓库名称。")
    if name in (".", "..") or not _REPO_NAME_PATTERN.match(name):
        raise UsageError(
            f"非法的仓库名称: '{repo_name}' (只允许字母、数字、'.'、'_'、'-')"
        )
    return name


def build_run_context(repo_name: str, global_config: GlobalConfig) -> RunContext:
    """
    (V5.0) 根据命令行参数构建 RunContext。
    工作区路径: <repositories_dir>/<repo_name>
    输出路径:   <output_dir>/<repo_name>.csv
    """
    name = validate_repo_name(repo_name)
    clone_path = os.path.abspath(os.path.join(global_config.repositories_dir, name))
    output_path = os.path.abspath(os.path.join(global_config.output_dir, f"{name}.csv"))
    return RunContext(
        repo_name=name,
        owner=global_config.github_owner,
        clone_path=clone_path,
        output_path=output_path,
        global_config=global_config,
    )
