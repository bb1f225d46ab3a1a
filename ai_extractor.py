# ai_extractor.py
import importlib
import json
import logging
import os
import warnings

from config import GlobalConfig
from errors import ApplicationError, ContentError, QualityWarning
from llm.provider_abc import LLMProvider, PROVIDER_REGISTRY
from models import CleanedReport
from request_builder import ExtractionRequest
from text_cleaner import split_report_lines

logger = logging.getLogger(__name__)


# --- (V4.1) 动态加载器 ---
def load_providers_dynamically(script_base_path: str):
    """
    (V4.1) 扫描 llm/ 目录下的所有 .py 文件并导入它们。
    这将触发 @register_provider 装饰器，将类注册到 PROVIDER_REGISTRY 中。
    """
    llm_dir = os.path.join(script_base_path, "llm")
    if not os.path.exists(llm_dir):
        logger.warning(f"⚠️ 未找到 llm 目录: {llm_dir}")
        return

    for filename in sorted(os.listdir(llm_dir)):
        if (
            filename.endswith(".py")
            and filename != "__init__.py"
            and filename != "provider_abc.py"
        ):
            module_name = f"llm.{filename[:-3]}"
            try:
                importlib.import_module(module_name)
            except ImportError as e:
                logger.error(f"❌ 动态加载模块 {module_name} 失败: {e}")


# --- (V4.1) 工厂函数 ---
def get_llm_provider(provider_id: str, global_config: GlobalConfig) -> LLMProvider:
    """
    (V4.1) 工厂函数：基于 Registry Pattern 实现。
    从 PROVIDER_REGISTRY 查找并实例化供应商。
    """
    logger.info(f"ℹ️ 正在初始化 LLM 供应商: {provider_id}")

    # 1. 动态加载所有可能的 providers
    load_providers_dynamically(global_config.script_base_path)

    # 2. 检查配置
    if not global_config.is_provider_configured(provider_id):
        logger.error(f"❌ 供应商 '{provider_id}' 未配置 API Key。")
        raise ValueError(
            f"供应商 '{provider_id}' 未配置。 "
            f"请在您的 .env 文件中设置相应的 API 密钥。"
        )

    # 3. 从注册表中查找
    if provider_id not in PROVIDER_REGISTRY:
        logger.error(f"❌ 未知的 LLM 供应商: '{provider_id}'")
        logger.error(f"   可用供应商: {list(PROVIDER_REGISTRY.keys())}")
        raise ValueError(f"未知的 LLM 供应商: {provider_id}")

    # 4. 实例化
    provider_class = PROVIDER_REGISTRY[provider_id]
    return provider_class(global_config)


class AIExtractionService:
    """
    (V5.0) 执行一次 AI 提取并校验结果。
    - 传输失败 (TransportError) 由 provider 抛出，这里不捕获
    - 非 200 -> ApplicationError (携带原始响应体)
    - 200 但文本为空 / null -> ContentError
    - 清洗后只有表头或为空 -> QualityWarning (不中断运行)
    """

    def __init__(self, provider: LLMProvider):
        self.provider = provider
        logger.info(
            f"✅ 🤖 AI 提取服务已初始化 (Provider: {self.provider.__class__.__name__})"
        )

    def extract_report(self, request: ExtractionRequest) -> CleanedReport:
        logger.info("=" * 50)
        logger.info("🚀 步骤 2: 发送数据给 AI 进行分析")
        logger.info("=" * 50)

        response = self.provider.send(request)

        if not response.ok:
            logger.error(f"❌ AI 调用失败，HTTP 状态码 {response.status_code}。")
            logger.error("   常见原因: API Key 错误或模型名称无效。")
            logger.error(f"   API 响应: {response.body}")
            raise ApplicationError(response.status_code, response.body)

        generated = self._extract_generated_text(response.body)

        lines = split_report_lines(generated)
        report = CleanedReport(lines=tuple(lines))

        if report.is_header_only:
            message = (
                "AI 回复清洗后只有表头或为空，可能是仓库中没有找到相关配置。"
            )
            logger.warning(f"⚠️ {message}")
            logger.warning(f"   完整 AI 回复:\n{generated}")
            warnings.warn(message, QualityWarning, stacklevel=2)
        else:
            logger.info(f"✅ AI 提取完成，共 {len(report.lines) - 1} 条配置记录")

        return report

    def _extract_generated_text(self, body: str) -> str:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise ContentError(
                f"API 调用成功，但响应不是合法 JSON。完整响应: {body}"
            ) from e

        if not isinstance(payload, dict):
            raise ContentError(f"API 调用成功，但响应结构异常。完整响应: {body}")

        text = self.provider.extract_text(payload)
        if not isinstance(text, str) or not text.strip() or text.strip() == "null":
            raise ContentError(
                f"API 调用成功，但未获得有效的回复内容。完整响应: {body}"
            )
        return text
