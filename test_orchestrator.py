import os
import subprocess
import tempfile
import unittest
from unittest import mock

from ai_extractor import AIExtractionService
from config import GlobalConfig
from context import build_run_context
from dependencies import DependencyResolver
from errors import (
    ApplicationError,
    ContentError,
    CredentialError,
    PublishError,
    QualityWarning,
    SummarizationError,
)
from git_utils import clone_repository
from llm.mock_provider import MockProvider, gemini_envelope
from models import Credentials, PublishResult, SummaryArtifact
from orchestrator import ConfigAuditOrchestrator
from publishers.base import BasePublisher
from summarizers.base import Summarizer


class FakeSummarizer(Summarizer):
    """在仓库目录内写出一个固定的摘要文件"""

    def __init__(self, content="<file path='application-dyn-prd.yml'>a: 1</file>", fail=False):
        self.content = content
        self.fail = fail
        self.seen_files = None

    @property
    def name(self):
        return "fake"

    def summarize(self, repo_path):
        self.seen_files = sorted(os.listdir(repo_path))
        if self.fail:
            raise SummarizationError("no output")
        path = os.path.join(repo_path, "repomix-output.xml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.content)
        return SummaryArtifact(path)


class FakePublisher(BasePublisher):

    def __init__(self, context, fail=False):
        super().__init__(context)
        self.fail = fail
        self.published = []

    @property
    def name(self):
        return "fake-storage"

    def is_enabled(self):
        return True

    def publish(self, report_path):
        if self.fail:
            raise PublishError("denied")
        self.published.append(report_path)
        os.remove(report_path)
        return PublishResult(uri="gs://b/x.csv", url="https://example/b/x.csv", success=True)


def fake_clone(context):
    os.makedirs(os.path.join(context.clone_path, "src"))
    with open(os.path.join(context.clone_path, "src", "application-dyn-prd.yml"), "w") as f:
        f.write("a: 1\n")
    return True


class TestConfigAuditOrchestrator(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = self._tmp.name
        self.context = self.make_context()

    def make_context(self, credentials=None):
        config = GlobalConfig(
            credentials=credentials or Credentials("ghp_test", "gem_test"),
            repositories_dir=os.path.join(self.tmp, "repositories"),
            output_dir=os.path.join(self.tmp, "out"),
        )
        return build_run_context("orders", config)

    def make_orchestrator(self, context=None, provider_kwargs=None, publishers=(), **overrides):
        context = context or self.context
        kwargs = dict(
            dependency_resolver=DependencyResolver(requirements=[]),
            acquirer=fake_clone,
            summarizer=FakeSummarizer(),
            ai_service=AIExtractionService(
                MockProvider(context.global_config, **(provider_kwargs or {}))
            ),
            publishers=list(publishers),
        )
        kwargs.update(overrides)
        return ConfigAuditOrchestrator(context, **kwargs)

    def test_degraded_run_keeps_local_report(self):
        outcome = self.make_orchestrator().run()

        self.assertTrue(outcome.degraded)
        self.assertEqual(outcome.report_path, self.context.output_path)
        self.assertEqual(outcome.row_count, 1)
        self.assertFalse(outcome.quality_warning)
        with open(self.context.output_path, encoding="utf-8") as f:
            lines = f.read().splitlines()
        self.assertTrue(lines[0].startswith("Config key,Config Value,Environment"))
        self.assertEqual(len(lines), 2)
        self.assertFalse(os.path.exists(self.context.clone_path))

    @mock.patch("publishers.gcs_publisher.subprocess.run")
    @mock.patch("publishers.gcs_publisher.shutil.which", return_value="/usr/bin/gcloud")
    def test_unconfigured_storage_key_skips_publishing(self, which, gcloud_run):
        """未设置服务账号密钥时由发布工厂决定降级，本地文件保留"""
        self.assertIsNone(self.context.global_config.credentials.gcs_key_path)
        orchestrator = ConfigAuditOrchestrator(
            self.context,
            dependency_resolver=DependencyResolver(requirements=[]),
            acquirer=fake_clone,
            summarizer=FakeSummarizer(),
            ai_service=AIExtractionService(MockProvider(self.context.global_config)),
            publishers=None,
        )

        outcome = orchestrator.run()

        self.assertTrue(outcome.degraded)
        self.assertEqual(outcome.report_path, self.context.output_path)
        self.assertTrue(os.path.exists(self.context.output_path))
        self.assertFalse(os.path.exists(self.context.clone_path))
        gcloud_run.assert_not_called()

    def test_published_run_removes_local_report(self):
        publisher = FakePublisher(self.context)
        outcome = self.make_orchestrator(publishers=[publisher]).run()

        self.assertFalse(outcome.degraded)
        self.assertIsNone(outcome.report_path)
        self.assertEqual(publisher.published, [self.context.output_path])
        self.assertEqual(outcome.publish_results[0].url, "https://example/b/x.csv")
        self.assertFalse(os.path.exists(self.context.output_path))
        self.assertFalse(os.path.exists(self.context.clone_path))

    def test_publish_failure_keeps_local_report(self):
        orchestrator = self.make_orchestrator(
            publishers=[FakePublisher(self.context, fail=True)]
        )
        with self.assertRaises(PublishError):
            orchestrator.run()
        self.assertTrue(os.path.exists(self.context.output_path))
        self.assertFalse(os.path.exists(self.context.clone_path))

    def test_summarization_failure_cleans_workspace(self):
        orchestrator = self.make_orchestrator(summarizer=FakeSummarizer(fail=True))
        with self.assertRaises(SummarizationError):
            orchestrator.run()
        self.assertFalse(os.path.exists(self.context.clone_path))
        self.assertFalse(os.path.exists(self.context.output_path))

    def test_empty_content_writes_no_report(self):
        orchestrator = self.make_orchestrator(provider_kwargs={"body": gemini_envelope(None)})
        with self.assertRaises(ContentError):
            orchestrator.run()
        self.assertFalse(os.path.exists(self.context.output_path))
        self.assertFalse(os.path.exists(self.context.clone_path))

    def test_application_error_carries_raw_body(self):
        orchestrator = self.make_orchestrator(
            provider_kwargs={"status_code": 500, "body": "upstream exploded"}
        )
        with self.assertRaises(ApplicationError) as ctx:
            orchestrator.run()
        self.assertEqual(ctx.exception.body, "upstream exploded")
        self.assertFalse(os.path.exists(self.context.clone_path))

    def test_header_only_report_is_still_written(self):
        orchestrator = self.make_orchestrator(
            provider_kwargs={"body": gemini_envelope("```csv\nConfig key,Config Value\n```")}
        )
        with self.assertWarns(QualityWarning):
            outcome = orchestrator.run()
        self.assertTrue(outcome.quality_warning)
        self.assertEqual(outcome.row_count, 0)
        with open(self.context.output_path, encoding="utf-8") as f:
            self.assertEqual(f.read(), "Config key,Config Value\n")

    def test_missing_credentials_stop_before_clone(self):
        context = self.make_context(credentials=Credentials(None, "gem"))
        acquirer = mock.Mock(side_effect=fake_clone)
        with self.assertRaises(CredentialError):
            self.make_orchestrator(context=context, acquirer=acquirer).run()
        acquirer.assert_not_called()

    @mock.patch("git_utils.subprocess.run")
    def test_leftover_workspace_is_reused_without_cloning(self, run):
        run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
        os.makedirs(self.context.clone_path)
        with open(os.path.join(self.context.clone_path, "leftover.yml"), "w") as f:
            f.write("b: 2\n")
        summarizer = FakeSummarizer()

        self.make_orchestrator(acquirer=clone_repository, summarizer=summarizer).run()

        self.assertEqual(summarizer.seen_files, ["leftover.yml"])
        for call in run.call_args_list:
            self.assertNotIn("clone", call.args[0])
        self.assertFalse(os.path.exists(self.context.clone_path))

    def test_single_ai_request_per_run(self):
        service = AIExtractionService(MockProvider(self.context.global_config))
        self.make_orchestrator(ai_service=service).run()
        self.assertEqual(service.provider.requests_sent, 1)

    def test_default_provider_from_configuration(self):
        config = GlobalConfig(
            credentials=Credentials("ghp_test", None),
            repositories_dir=os.path.join(self.tmp, "repositories"),
            output_dir=os.path.join(self.tmp, "out"),
            default_llm="mock",
        )
        context = build_run_context("orders", config)
        # 只跳过凭证校验，AI 服务由工厂根据 default_llm 构建
        with mock.patch("orchestrator.validate_credentials"):
            outcome = self.make_orchestrator(context=context, ai_service=None).run()
        self.assertEqual(outcome.row_count, 1)


if __name__ == "__main__":
    unittest.main()
