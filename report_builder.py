# report_builder.py
"""
[V5.0] 报告保存
把清洗后的 CSV 写入以仓库命名的本地文件 (<repository_name>.csv)。
"""
import logging
import os

from models import CleanedReport

logger = logging.getLogger(__name__)


def save_report(report: CleanedReport, output_path: str) -> str:
    """
    保存 CSV 报告。
    空报告也会写出 (空文件)，只有表头的报告同样保留，供人工确认。
    """
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(report.to_text())

    logger.info(f"✅ 报告已保存至 {output_path} ({len(report.lines)} 行)")
    return output_path
