import os
import unittest
from unittest import mock

import cli
from errors import CredentialError
from models import PublishResult
from orchestrator import RunOutcome

ENV = {"GITHUB_TOKEN": "ghp_test", "GEMINI_API_KEY": "gem_test"}


@mock.patch("cli.load_environment", return_value=None)
@mock.patch.dict(os.environ, ENV, clear=True)
class TestRunCli(unittest.TestCase):

    def test_missing_repository_name(self, load_environment):
        with mock.patch("cli.ConfigAuditOrchestrator") as orchestrator:
            self.assertEqual(cli.run_cli([]), 1)
        orchestrator.assert_not_called()

    def test_extra_arguments_are_usage_error(self, load_environment):
        self.assertEqual(cli.run_cli(["a", "b"]), 1)

    def test_invalid_repository_name(self, load_environment):
        with mock.patch("cli.ConfigAuditOrchestrator") as orchestrator:
            self.assertEqual(cli.run_cli(["../etc"]), 1)
        orchestrator.assert_not_called()

    def test_invalid_timeout_configuration(self, load_environment):
        with mock.patch.dict(os.environ, {"GEMINI_TIMEOUT_SECONDS": "abc"}):
            self.assertEqual(cli.run_cli(["orders"]), 1)

    @mock.patch("cli.ConfigAuditOrchestrator")
    def test_degraded_success(self, orchestrator, load_environment):
        orchestrator.return_value.run.return_value = RunOutcome(
            repo_name="orders", report_path="/tmp/orders.csv", row_count=3
        )
        self.assertEqual(cli.run_cli(["orders"]), 0)

        context = orchestrator.call_args.args[0]
        self.assertEqual(context.repo_name, "orders")
        self.assertEqual(context.owner, "Meesho")
        self.assertTrue(context.output_path.endswith("orders.csv"))

    @mock.patch("cli.ConfigAuditOrchestrator")
    def test_published_success_with_quality_warning(self, orchestrator, load_environment):
        orchestrator.return_value.run.return_value = RunOutcome(
            repo_name="orders",
            report_path=None,
            row_count=0,
            quality_warning=True,
            publish_results=[PublishResult("gs://b/orders.csv", "https://x/b/orders.csv", True)],
        )
        self.assertEqual(cli.run_cli(["orders"]), 0)

    @mock.patch("cli.ConfigAuditOrchestrator")
    def test_unsuccessful_publish_result_fails(self, orchestrator, load_environment):
        orchestrator.return_value.run.return_value = RunOutcome(
            repo_name="orders",
            report_path=None,
            row_count=1,
            publish_results=[PublishResult("gs://b/orders.csv", "https://x/b/orders.csv", False)],
        )
        self.assertEqual(cli.run_cli(["orders"]), 1)

    @mock.patch("cli.ConfigAuditOrchestrator")
    def test_fatal_stage_error(self, orchestrator, load_environment):
        orchestrator.return_value.run.side_effect = CredentialError("GITHUB_TOKEN 未设置")
        self.assertEqual(cli.run_cli(["orders"]), 1)

    def test_main_exits_with_run_cli_code(self, load_environment):
        with mock.patch("cli.run_cli", return_value=1), mock.patch("cli.utils.setup_logging"):
            with self.assertRaises(SystemExit) as ctx:
                cli.main()
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
