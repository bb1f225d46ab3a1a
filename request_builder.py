# request_builder.py
"""
[V5.0] 提取请求构建器
把固定的多步骤指令模板与仓库摘要原文拼接为 AI 请求体。
- 请求体以流的形式分块生成 (chunked 上传)，不会作为单个命令行参数传递，
  也不会在内存中整体拼接，因此没有参数长度上限。
- 本模块不对摘要大小做任何限制。
"""
import json
import logging
import os
from dataclasses import dataclass
from typing import Iterator

from config import GlobalConfig
from errors import ConfigurationError
from models import SummaryArtifact

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

# 请求信封: {"contents": [{"parts": [{"text": <instruction + summary>}]}]}
_ENVELOPE_PREFIX = '{"contents": [{"parts": [{"text": "'
_ENVELOPE_SUFFIX = '"}]}]}'


def _escape_json_fragment(text: str) -> str:
    """把一段文本转义为 JSON 字符串内容 (不含首尾引号)"""
    return json.dumps(text, ensure_ascii=False)[1:-1]


def load_instruction(global_config: GlobalConfig) -> str:
    """(V5.0) 从 prompts/ 目录加载指令模板"""
    template_path = os.path.join(
        global_config.prompts_dir, global_config.instruction_template
    )
    try:
        with open(template_path, "r", encoding="utf-8") as f:
            instruction = f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(f"提示词模板未找到: {template_path}") from e

    if not instruction.strip():
        raise ConfigurationError(f"提示词模板为空: {template_path}")
    return instruction


@dataclass(frozen=True)
class ExtractionRequest:
    """
    指令模板 + 摘要原文。
    只在本次运行中存在，不落盘。
    """

    instruction: str
    artifact: SummaryArtifact

    def iter_text(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[str]:
        """按块产出 instruction + 摘要原文"""
        yield self.instruction
        with open(self.artifact.path, "r", encoding="utf-8", errors="replace") as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def iter_payload(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """按块产出 UTF-8 编码的 JSON 请求体"""
        yield _ENVELOPE_PREFIX.encode("utf-8")
        for chunk in self.iter_text(chunk_size):
            yield _escape_json_fragment(chunk).encode("utf-8")
        yield _ENVELOPE_SUFFIX.encode("utf-8")


def build_extraction_request(
    global_config: GlobalConfig, artifact: SummaryArtifact
) -> ExtractionRequest:
    """(V5.0) 组合指令模板与摘要文件"""
    instruction = load_instruction(global_config)
    request = ExtractionRequest(instruction=instruction, artifact=artifact)
    logger.info(
        f"✅ 提取请求已就绪 (指令 {len(instruction)} 字符, 摘要 {artifact.size_bytes} bytes)"
    )
    return request
