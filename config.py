# config.py
"""
[V5.0] 全局配置
- [V5.0] GlobalConfig 改为不可变的 dataclass，在入口处构建一次后按引用传递，
  各模块不再直接读取 os.environ。
- [V5.0] .env 加载从模块导入时机移到 load_environment()，避免导入即产生副作用。
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from models import Credentials, ExclusionPolicy

logger = logging.getLogger(__name__)

# --- 脚本基础路径 ---
SCRIPT_BASE_PATH = os.path.abspath(os.path.dirname(__file__))

# --- 摘要工具的默认排除规则 (减少发送给 AI 的数据量) ---
DEFAULT_EXCLUDE_PATTERNS: Tuple[str, ...] = (
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/*.min.js",
    "**/*.svg",
    "**/*.png",
    "**/*.jpg",
    "**/*.jpeg",
    "**/*.gif",
    "**/*.webp",
    "**/*.ico",
    "**/*.pdf",
    "**/*.zip",
    "**/*.gz",
    "**/*.tar",
    "**/*.jar",
    "**/*.html",
    "**/docs/**",
)


def load_environment(base_path: str = SCRIPT_BASE_PATH) -> Optional[str]:
    """
    (V5.0) 加载 .env 文件：优先脚本目录，其次当前工作目录。
    已存在的环境变量不会被覆盖。
    返回实际加载的 .env 路径 (未找到则为 None)。
    """
    env_path = os.path.join(base_path, ".env")
    if os.path.exists(env_path):
        load_dotenv(env_path)
        logger.info(f"✅ 已从脚本目录加载 .env: {env_path}")
        return env_path

    cwd_env_path = os.path.join(os.getcwd(), ".env")
    if os.path.exists(cwd_env_path):
        load_dotenv(cwd_env_path)
        logger.info(f"✅ 已从当前目录加载 .env: {cwd_env_path}")
        return cwd_env_path

    logger.info("ℹ️ 未找到 .env 文件，仅使用进程环境变量。")
    return None


@dataclass(frozen=True)
class GlobalConfig:
    """
    (V5.0) 配置审计的全局应用配置。
    """

    # --- 凭证 ---
    credentials: Credentials

    # --- 路径配置 ---
    script_base_path: str = SCRIPT_BASE_PATH
    repositories_dir: str = "repositories"
    output_dir: str = "."
    prompts_dir: str = os.path.join(SCRIPT_BASE_PATH, "prompts")

    # --- GitHub ---
    github_owner: str = "Meesho"
    github_host: str = "github.com"

    # --- 摘要工具 (repomix) ---
    summarizer_package: str = "repomix@latest"
    summary_filename: str = "repomix-output.xml"
    summarizer_config_filename: str = "repomix.config.json"
    exclusion_policy: ExclusionPolicy = field(
        default_factory=lambda: ExclusionPolicy(DEFAULT_EXCLUDE_PATTERNS)
    )

    # --- AI 供应商 ---
    default_llm: str = "gemini"
    gemini_model: str = "gemini-2.5-pro"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: Optional[float] = None
    instruction_template: str = "config_audit.txt"

    # --- Google Cloud Storage ---
    gcs_bucket: str = "dynamic-configs-audit"
    storage_host: str = "storage.googleapis.com"

    def is_provider_configured(self, provider: str) -> bool:
        """
        检查特定供应商是否已在环境中设置其 API 密钥。
        mock 供应商无需密钥。
        """
        if provider == "gemini":
            return bool(self.credentials.gemini_api_key)
        if provider == "mock":
            return True
        return False


def _normalize_empty(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_global_config(env: Optional[Mapping[str, str]] = None) -> GlobalConfig:
    """
    (V5.0) 从环境变量构建 GlobalConfig。
    只做解析，不做必填校验 (必填校验由 credentials.validate_credentials 负责)。
    """
    if env is None:
        env = os.environ

    credentials = Credentials(
        github_token=_normalize_empty(env.get("GITHUB_TOKEN")),
        gemini_api_key=_normalize_empty(env.get("GEMINI_API_KEY")),
        gcs_key_path=_normalize_empty(env.get("GCS_SERVICE_ACCOUNT_KEY_PATH")),
    )

    raw_timeout = _normalize_empty(env.get("GEMINI_TIMEOUT_SECONDS"))
    gemini_timeout_seconds: Optional[float] = None
    if raw_timeout:
        try:
            gemini_timeout_seconds = float(raw_timeout)
        except ValueError as e:
            raise ValueError("GEMINI_TIMEOUT_SECONDS 必须是数字") from e
        if gemini_timeout_seconds <= 0:
            raise ValueError("GEMINI_TIMEOUT_SECONDS 必须大于 0")

    return GlobalConfig(
        credentials=credentials,
        repositories_dir=_normalize_empty(env.get("AUDIT_REPOSITORIES_DIR"))
        or "repositories",
        output_dir=_normalize_empty(env.get("AUDIT_OUTPUT_DIR")) or ".",
        github_owner=_normalize_empty(env.get("GITHUB_OWNER")) or "Meesho",
        default_llm=(_normalize_empty(env.get("DEFAULT_LLM")) or "gemini").lower(),
        gemini_model=_normalize_empty(env.get("GEMINI_MODEL")) or "gemini-2.5-pro",
        gemini_timeout_seconds=gemini_timeout_seconds,
        gcs_bucket=_normalize_empty(env.get("GCS_BUCKET")) or "dynamic-configs-audit",
    )
