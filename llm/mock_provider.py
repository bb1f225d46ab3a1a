# llm/mock_provider.py
"""
[测试样例] 一个模拟的 LLM 供应商
不进行任何实际 API 调用，返回 Gemini 格式的固定回复。
用于离线运行 (DEFAULT_LLM=mock) 与单元测试。
"""
import json
import logging
from typing import Any, Dict, Optional

from llm.provider_abc import LLMProvider, register_provider
from config import GlobalConfig
from models import ExtractionResponse

logger = logging.getLogger(__name__)

MOCK_CSV = (
    "```csv\n"
    "Config key,Config Value,Environment,Application Profiles,Config Type,Config Value type,Current Usage\n"
    "\n"
    "feature.mock.enabled,true,prd,default,business,boolean,[Mock] 由 MockProvider 生成\n"
    "```"
)


def gemini_envelope(text: Optional[str]) -> str:
    """构造与 Gemini generateContent 相同结构的响应体"""
    return json.dumps(
        {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}
    )


@register_provider("mock")
class MockProvider(LLMProvider):
    """
    模拟的 Provider。
    status_code / body 可在构造时覆盖，用于模拟各种失败场景。
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        status_code: int = 200,
        body: Optional[str] = None,
    ):
        self.global_config = global_config
        self.status_code = status_code
        self.body = body if body is not None else gemini_envelope(MOCK_CSV)
        self.requests_sent = 0
        self.last_payload: Optional[bytes] = None
        logger.info("✅ MockProvider 已初始化 (无需 API Key)")

    def send(self, request) -> ExtractionResponse:
        self.requests_sent += 1
        self.last_payload = b"".join(request.iter_payload())
        return ExtractionResponse(status_code=self.status_code, body=self.body)

    def extract_text(self, payload: Dict[str, Any]) -> Optional[str]:
        try:
            return payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
