# text_cleaner.py
"""
[V5.0] AI 回复清洗
去除 LLM 可能输出的代码块包裹标记 (```csv ... ```) 以及空行。
与网络调用解耦，可单独测试。
"""
import re
from typing import List

# 第一行开头的 ``` 或 ```csv
_OPEN_FENCE = re.compile(r"^\s*```(?:csv)?", re.IGNORECASE)
# 最后一行结尾的 ```
_CLOSE_FENCE = re.compile(r"```\s*$")


def _drop_blank_lines(lines: List[str]) -> List[str]:
    return [line for line in lines if line.strip()]


def _clean_once(text: str) -> str:
    lines = _drop_blank_lines(text.splitlines())
    if lines:
        lines[0] = _OPEN_FENCE.sub("", lines[0], count=1)
        lines[-1] = _CLOSE_FENCE.sub("", lines[-1], count=1)
    return "\n".join(_drop_blank_lines(lines))


def clean_report_text(text: str) -> str:
    """
    清洗 AI 返回的 CSV 文本：
    1. 去掉首行开头的 ``` / ```csv 与末行结尾的 ```
    2. 删除所有空行 (含只有空白字符的行)
    重复执行直到结果不再变化，因此对已清洗的文本再次调用结果不变。
    """
    if not text:
        return ""
    previous = None
    current = text
    while current != previous:
        previous = current
        current = _clean_once(current)
    return current


def split_report_lines(text: str) -> List[str]:
    """清洗后按行拆分"""
    cleaned = clean_report_text(text)
    return cleaned.split("\n") if cleaned else []
