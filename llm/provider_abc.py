# llm/provider_abc.py
"""
[V3.5] 所有 LLM 供应商的抽象基类 (ABC)。
[V4.1] 新增 Registry Pattern 支持，允许动态注册供应商。
[V5.0] 接口改为 "发送一次请求 + 按供应商格式提取文本"，校验逻辑移至 ai_extractor。
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

from models import ExtractionResponse

# --- [V4.1] 注册表机制 START ---
# 全局注册表，存储 "provider_id" -> Provider Class 的映射
PROVIDER_REGISTRY: Dict[str, Type["LLMProvider"]] = {}


def register_provider(provider_id: str):
    """
    类装饰器：用于将具体的 Provider 实现类注册到全局注册表中。

    使用示例:
        @register_provider("gemini")
        class GeminiProvider(LLMProvider):
            ...
    """

    def decorator(cls):
        if provider_id in PROVIDER_REGISTRY:
            raise ValueError(
                f"Provider id '{provider_id}' 已经被注册过 ({PROVIDER_REGISTRY[provider_id].__name__})"
            )
        PROVIDER_REGISTRY[provider_id] = cls
        return cls

    return decorator


# --- [V4.1] 注册表机制 END ---


class LLMProvider(ABC):
    """
    (V5.0 接口) LLM 供应商的抽象接口。
    """

    @abstractmethod
    def send(self, request) -> ExtractionResponse:
        """
        (V5.0) 发送一次请求，只尝试一次，不重试。
        :param request: request_builder.ExtractionRequest
        :return: 原始状态码与响应体 (任何状态码都原样返回)
        :raises TransportError: 未收到任何响应 (网络错误、连接失败等)
        """
        pass

    @abstractmethod
    def extract_text(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        (V5.0) 从已解析的 JSON 响应中取出模型生成的文本。
        路径不存在时返回 None。
        """
        pass
