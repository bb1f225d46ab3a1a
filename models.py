# models.py
import json
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Credentials:
    """密钥集合 (只在内存中存在，不写入任何文件)"""

    github_token: Optional[str]
    gemini_api_key: Optional[str]
    gcs_key_path: Optional[str] = None

    def __repr__(self) -> str:
        # 防止密钥通过日志或异常栈泄露
        return (
            "Credentials(github_token=***, gemini_api_key=***, "
            f"gcs_key_path={self.gcs_key_path!r})"
        )


@dataclass(frozen=True)
class ExclusionPolicy:
    """摘要工具的排除规则 (glob)"""

    patterns: Tuple[str, ...]

    def to_repomix_config(self, output_filename: str) -> str:
        """渲染为 repomix.config.json 的内容"""
        descriptor = {
            "output": {"filePath": output_filename, "style": "xml"},
            "ignore": {"customPatterns": list(self.patterns)},
        }
        return json.dumps(descriptor, indent=2)


@dataclass(frozen=True)
class SummaryArtifact:
    """摘要工具产出的单个文本文件，生命周期与工作区相同"""

    path: str

    @property
    def size_bytes(self) -> int:
        return os.path.getsize(self.path)


@dataclass(frozen=True)
class ExtractionResponse:
    """AI 服务的原始回复"""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200


@dataclass(frozen=True)
class CleanedReport:
    """清洗后的 CSV 行；非空时第一行为表头"""

    lines: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_header_only(self) -> bool:
        return len(self.lines) <= 1

    def to_text(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"


@dataclass(frozen=True)
class PublishResult:
    """上传结果"""

    uri: str
    url: str
    success: bool
