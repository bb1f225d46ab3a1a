# dependencies.py
"""
[V5.0] 外部工具依赖检查与自动安装
- 按检测到的操作系统 / 包管理器选择安装命令
- 安装后重新检查，仍缺失则终止运行
- 未知系统且工具缺失时直接失败，不做静默降级
"""
import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from errors import DependencyError

logger = logging.getLogger(__name__)

# --- Google Cloud SDK 的仓库初始化脚本 (apt / yum) ---
_GCLOUD_APT_INSTALL = (
    "sudo apt-get update && sudo apt-get install -y apt-transport-https ca-certificates gnupg curl"
    " && echo 'deb [signed-by=/usr/share/keyrings/cloud.google.gpg] "
    "https://packages.cloud.google.com/apt cloud-sdk main'"
    " | sudo tee /etc/apt/sources.list.d/google-cloud-sdk.list"
    " && curl https://packages.cloud.google.com/apt/doc/apt-key.gpg"
    " | sudo gpg --dearmor -o /usr/share/keyrings/cloud.google.gpg"
    " && sudo apt-get update && sudo apt-get install -y google-cloud-cli"
)

_GCLOUD_YUM_REPO = """[google-cloud-cli]
name=Google Cloud CLI
baseurl=https://packages.cloud.google.com/yum/repos/cloud-sdk-el8-x86_64
enabled=1
gpgcheck=1
repo_gpgcheck=0
gpgkey=https://packages.cloud.google.com/yum/doc/rpm-package-key.gpg"""


def _gcloud_rpm_install(package_manager: str) -> str:
    return (
        f"printf '%s\\n' '{_GCLOUD_YUM_REPO}'"
        " | sudo tee /etc/yum.repos.d/google-cloud-sdk.repo"
        f" && sudo {package_manager} install -y google-cloud-cli"
    )


@dataclass(frozen=True)
class ToolRequirement:
    """
    一个必需的命令行工具。
    installers: 包管理器族 (brew/apt/yum/dnf) -> 安装命令 (shell 字符串)
    """

    command: str
    package: str
    installers: Dict[str, str] = field(default_factory=dict)


DEFAULT_REQUIREMENTS: List[ToolRequirement] = [
    ToolRequirement(
        command="git",
        package="git",
        installers={
            "brew": "brew install git",
            "apt": "sudo apt-get update && sudo apt-get install -y git",
            "yum": "sudo yum install -y git",
            "dnf": "sudo dnf install -y git",
        },
    ),
    ToolRequirement(
        command="npx",
        package="nodejs",
        installers={
            "brew": "brew install node",
            "apt": "sudo apt-get install -y nodejs npm",
            "yum": "sudo yum install -y nodejs",
            "dnf": "sudo dnf install -y nodejs",
        },
    ),
    ToolRequirement(
        command="gcloud",
        package="google-cloud-sdk",
        installers={
            "brew": "brew install --cask google-cloud-sdk",
            "apt": _GCLOUD_APT_INSTALL,
            "yum": _gcloud_rpm_install("yum"),
            "dnf": _gcloud_rpm_install("dnf"),
        },
    ),
]

# 与 ToolRequirement.installers 的键一一对应
_LINUX_PACKAGE_MANAGERS = (("apt-get", "apt"), ("yum", "yum"), ("dnf", "dnf"))


def detect_package_manager(
    platform: Optional[str] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Optional[str]:
    """
    检测当前系统可用的包管理器族。
    返回 "brew" / "apt" / "yum" / "dnf"，无法识别时返回 None。
    """
    platform = platform or sys.platform
    if platform == "darwin":
        return "brew" if which("brew") else None
    if platform.startswith("linux"):
        for executable, family in _LINUX_PACKAGE_MANAGERS:
            if which(executable):
                return family
    return None


class DependencyResolver:
    """
    (V5.0) 确保所有必需工具可用。
    """

    def __init__(
        self,
        requirements: Sequence[ToolRequirement] = tuple(DEFAULT_REQUIREMENTS),
        package_manager: Optional[str] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.requirements = tuple(requirements)
        self._package_manager = package_manager
        self._which = which
        self._runner = runner

    def missing_tools(self) -> List[ToolRequirement]:
        return [req for req in self.requirements if not self._which(req.command)]

    def ensure_all(self) -> None:
        """检查所有工具，缺失的尝试安装；任何一个最终缺失都会抛出 DependencyError"""
        missing = self.missing_tools()
        if not missing:
            logger.info("✅ 依赖检查通过: " + ", ".join(r.command for r in self.requirements))
            return

        package_manager = self._package_manager or detect_package_manager(which=self._which)
        if package_manager is None:
            names = ", ".join(f"'{r.package}'" for r in missing)
            raise DependencyError(
                f"不支持的操作系统或未找到受支持的包管理器 (brew, apt, yum, dnf)。"
                f"请手动安装 {names} 后重新运行。"
            )

        logger.info(f"ℹ️ 检测到包管理器: {package_manager}")
        for requirement in missing:
            self._install(requirement, package_manager)

    def _install(self, requirement: ToolRequirement, package_manager: str) -> None:
        install_cmd = requirement.installers.get(package_manager)
        if not install_cmd:
            raise DependencyError(
                f"没有适用于 {package_manager} 的 '{requirement.package}' 安装命令。"
                f"请手动安装后重新运行。"
            )

        logger.info("--- 依赖检查 ---")
        logger.info(
            f"⚠️ 未找到命令 '{requirement.command}'，正在尝试安装 '{requirement.package}'..."
        )
        try:
            # 安装命令包含 && 与管道，需要 shell 执行；输出直接透传到终端
            result = self._runner(install_cmd, shell=True, check=False)
            if result.returncode != 0:
                logger.error(
                    f"❌ 安装命令退出码 {result.returncode}: {requirement.package}"
                )
        except OSError as e:
            logger.error(f"❌ 执行安装命令失败: {e}")

        if not self._which(requirement.command):
            raise DependencyError(
                f"安装 '{requirement.package}' 失败。请手动安装后重新运行。"
            )
        logger.info(f"✅ 已成功安装 '{requirement.package}'")
        logger.info("----------------")
