# orchestrator.py
"""
[V5.0] 业务逻辑编排器
依赖检查 -> 凭证校验 -> 克隆 -> 摘要 -> 构建请求 -> AI 提取与校验 -> 保存 -> 发布
整个流程包裹在 workspace_guard 中，任何退出路径都会清理工作区。
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from context import RunContext
from credentials import validate_credentials
from dependencies import DependencyResolver
from errors import ConfigurationError
from git_utils import clone_repository
from ai_extractor import AIExtractionService, get_llm_provider
from models import PublishResult
from publishers.base import BasePublisher
from publishers.factory import get_active_publishers
import report_builder
from request_builder import build_extraction_request
from summarizers.base import Summarizer
from summarizers.repomix_summarizer import RepomixSummarizer
from workspace import workspace_guard

logger = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    """一次运行的结果"""

    repo_name: str
    # 发布成功后本地文件已删除，此时为 None
    report_path: Optional[str]
    row_count: int
    quality_warning: bool = False
    publish_results: List[PublishResult] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """未发布到远程，仅保留本地文件"""
        return not self.publish_results


class ConfigAuditOrchestrator:
    """
    (V5.0) 负责执行配置审计的核心业务逻辑。
    各外部协作者均可注入，测试时替换为假实现。
    """

    def __init__(
        self,
        context: RunContext,
        dependency_resolver: Optional[DependencyResolver] = None,
        acquirer: Callable[[RunContext], bool] = clone_repository,
        summarizer: Optional[Summarizer] = None,
        ai_service: Optional[AIExtractionService] = None,
        publishers: Optional[Sequence[BasePublisher]] = None,
    ):
        self.context = context
        self.global_config = context.global_config
        self.dependency_resolver = dependency_resolver or DependencyResolver()
        self.acquirer = acquirer
        self.summarizer = summarizer or RepomixSummarizer(self.global_config)
        self.ai_service = ai_service
        self.publishers = publishers

        logger.info("✅ ConfigAuditOrchestrator 已初始化")

    def run(self) -> RunOutcome:
        """
        (V5.0) 执行核心业务流程。
        任何阶段的致命错误都会以 AuditError 子类向上抛出，
        抛出前 workspace_guard 已删除工作区。
        """
        with workspace_guard(self.context.clone_path):
            return self._run_stages()

    def _run_stages(self) -> RunOutcome:
        # --- 0. 预检 (依赖与凭证) ---
        self.dependency_resolver.ensure_all()
        validate_credentials(self.global_config.credentials)

        # --- 1. 获取仓库 ---
        self.acquirer(self.context)

        # --- 2. 生成摘要 ---
        logger.info(f"📦 正在使用 {self.summarizer.name} 生成仓库摘要...")
        artifact = self.summarizer.summarize(self.context.clone_path)

        # --- 3. 构建请求 ---
        request = build_extraction_request(self.global_config, artifact)

        # --- 4. AI 提取与校验 ---
        ai_service = self.ai_service or self._build_ai_service()
        report = ai_service.extract_report(request)

        # --- 5. 保存本地报告 ---
        report_path = report_builder.save_report(report, self.context.output_path)
        outcome = RunOutcome(
            repo_name=self.context.repo_name,
            report_path=report_path,
            row_count=max(len(report.lines) - 1, 0),
            quality_warning=report.is_header_only,
        )

        # --- 6. 发布 ---
        publishers = (
            list(self.publishers)
            if self.publishers is not None
            else get_active_publishers(self.context)
        )
        if not publishers:
            logger.info(
                "ℹ️ 跳过 GCS 上传: 未安装 'gcloud' 或未设置 GCS_SERVICE_ACCOUNT_KEY_PATH。"
            )
            logger.info(f"   本地报告即最终产物: {report_path}")
            return outcome

        for publisher in publishers:
            outcome.publish_results.append(publisher.publish(report_path))
        outcome.report_path = None
        return outcome

    def _build_ai_service(self) -> AIExtractionService:
        try:
            provider = get_llm_provider(self.global_config.default_llm, self.global_config)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        return AIExtractionService(provider)
