# cli.py
"""
[V5.0] 命令行界面 (Interface) 层
一个位置参数: 仓库名称。
退出码: 0 成功 (含降级模式与质量警告)；1 参数错误或任意致命错误。
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

import utils
from config import load_environment, load_global_config
from context import build_run_context
from errors import AuditError, UsageError
from orchestrator import ConfigAuditOrchestrator

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """参数错误统一以退出码 1 结束 (argparse 默认是 2)"""

    def error(self, message):
        raise UsageError(message)


def setup_parser() -> argparse.ArgumentParser:
    """
    (V5.0) 负责所有 argparse 的定义。
    """
    parser = _ArgumentParser(
        prog="config-audit",
        description="动态配置审计 (V5.0): 克隆仓库 -> repomix 摘要 -> Gemini 提取 -> CSV -> GCS",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "repository_name",
        nargs="?",
        help="要分析的 GitHub 仓库名称 (owner 由 GITHUB_OWNER 指定，默认 Meesho)",
    )
    return parser


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    (V5.0) 主入口点，返回进程退出码。
    """
    # 1. 解析 Args
    parser = setup_parser()
    try:
        args = parser.parse_args(argv)
        if not args.repository_name:
            raise UsageError("请提供仓库名称作为第一个参数。")

        # 2. 加载 .env 与 GlobalConfig
        load_environment()
        global_config = load_global_config()

        # 3. 组装 RunContext
        run_context = build_run_context(args.repository_name, global_config)
    except UsageError as e:
        logger.error(f"❌ {e}")
        print(f"Usage: {parser.prog} <repository_name>", file=sys.stderr)
        return 1
    except ValueError as e:
        logger.error(f"❌ 配置错误: {e}")
        return 1

    logger.info("=" * 50)
    logger.info("🚀 (V5.0) 配置审计启动...")
    logger.info(f"   [目标仓库]: {run_context.owner}/{run_context.repo_name}")
    logger.info(f"   [工作区]: {run_context.clone_path}")
    logger.info(f"   [输出文件]: {run_context.output_path}")
    logger.info(f"   [LLM 供应商]: {global_config.default_llm}")
    logger.info("=" * 50)

    # 4. 运行 Orchestrator
    try:
        orchestrator = ConfigAuditOrchestrator(run_context)
        outcome = orchestrator.run()
    except AuditError as e:
        logger.error(f"❌ [{e.__class__.__name__}] {e}")
        return 1

    if outcome.quality_warning:
        logger.warning("⚠️ 报告只有表头或为空，请人工确认仓库中是否存在 application-dyn-*.yml。")
    if outcome.degraded:
        logger.info(f"✅ 报告已保存在本地: {outcome.report_path}")
    else:
        failed = [result for result in outcome.publish_results if not result.success]
        for result in outcome.publish_results:
            if result.success:
                logger.info(f"✅ 报告已发布: {result.url}")
            else:
                logger.error(f"❌ 报告发布失败: {result.uri}")
        if failed:
            return 1
    logger.info("--- 运行结束 ---")
    return 0


def main():
    """console_scripts 入口"""
    utils.setup_logging(os.environ.get("LOG_LEVEL", "INFO"))
    sys.exit(run_cli())
