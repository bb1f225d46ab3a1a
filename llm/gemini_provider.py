# llm/gemini_provider.py
"""
[V3.5] LLMProvider 针对 Google Gemini 的具体实现。
[V4.1] 使用 @register_provider 进行自动注册。
[V5.0] 改为直接调用 REST 接口 (requests)，以便区分传输失败与非 200 响应，
       并把请求体以流的形式上传。
"""
import logging
from typing import Any, Dict, Optional

import requests

from llm.provider_abc import LLMProvider, register_provider
from config import GlobalConfig
from errors import TransportError
from models import ExtractionResponse

logger = logging.getLogger(__name__)


@register_provider("gemini")
class GeminiProvider(LLMProvider):
    """
    (V5.0) Gemini generateContent 策略实现。
    """

    def __init__(self, global_config: GlobalConfig, session: Optional[requests.Session] = None):
        self.global_config = global_config
        api_key = global_config.credentials.gemini_api_key
        if not api_key:
            logger.error("❌ GEMINI_API_KEY 未设置。请检查您的 .env 文件。")
            raise ValueError("GEMINI_API_KEY 未设置。")

        self._api_key = api_key
        self.model = global_config.gemini_model
        self.timeout = global_config.gemini_timeout_seconds
        self.session = session or requests.Session()
        logger.info(f"✅ GeminiProvider 初始化成功 (模型: {self.model})")

    @property
    def endpoint(self) -> str:
        base_url = self.global_config.gemini_base_url.rstrip("/")
        return f"{base_url}/models/{self.model}:generateContent"

    def send(self, request) -> ExtractionResponse:
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key,
        }
        logger.info(f"🤖 正在调用 Gemini ({self.model}) ...")
        try:
            # data 传入生成器 -> requests 使用 chunked 编码流式上传
            resp = self.session.post(
                self.endpoint,
                data=request.iter_payload(),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Gemini 请求失败 (未收到响应): {e}") from e

        logger.info(f"ℹ️ Gemini 返回 HTTP {resp.status_code}")
        return ExtractionResponse(status_code=resp.status_code, body=resp.text)

    def extract_text(self, payload: Dict[str, Any]) -> Optional[str]:
        # .candidates[0].content.parts[0].text
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) else None
