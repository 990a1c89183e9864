"""
CLI tests using click's CliRunner with the backend services mocked.
"""

import pytest
from click.testing import CliRunner
from unittest.mock import AsyncMock, MagicMock, patch

from adstudio.cli.main import cli
from adstudio.core.exceptions import TransportError
from adstudio.core.models import (
    CopywritingCandidates,
    Experiment,
    ExperimentList,
    ExperimentMetrics,
    TaskData,
    TaskDetail,
    TaskList,
    TaskListItem,
)
from adstudio.services.experiment_service import ExperimentReport
from adstudio.services.metrics_service import MetricsAggregator


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def offline():
    """No logfire, no real HTTP client."""
    with patch("adstudio.cli.main.setup_logfire"), patch("adstudio.cli.common.ApiClient"):
        yield


class TestTasksCommand:

    def test_lists_tasks(self, runner):
        service = MagicMock()
        service.list_tasks = AsyncMock(return_value=TaskList(
            tasks=[TaskListItem(id="t1", status="completed", progress=100, product_name="Smart Watch Pro")],
            total=1, page=1, page_size=20, total_pages=1,
        ))

        with patch("adstudio.cli.tasks.CreativeService", return_value=service):
            result = runner.invoke(cli, ["tasks", "list", "--status", "completed"])

        assert result.exit_code == 0, result.output
        assert "Smart Watch Pro" in result.output
        service.list_tasks.assert_awaited_once_with(page=1, page_size=20, status="completed")

    def test_empty(self, runner):
        service = MagicMock()
        service.list_tasks = AsyncMock(return_value=TaskList())

        with patch("adstudio.cli.tasks.CreativeService", return_value=service):
            result = runner.invoke(cli, ["tasks", "list"])

        assert "No tasks found" in result.output

    def test_transport_error_exits_1(self, runner):
        service = MagicMock()
        service.list_tasks = AsyncMock(side_effect=TransportError("connection refused"))

        with patch("adstudio.cli.tasks.CreativeService", return_value=service):
            result = runner.invoke(cli, ["tasks", "list"])

        assert result.exit_code == 1


class TestExperimentsCommand:

    def test_list(self, runner):
        service = MagicMock()
        service.list = AsyncMock(return_value=ExperimentList(experiments=[
            Experiment(experiment_id="e1", name="CTA test", status="active",
                       start_at="2024-05-10T10:00:00Z", end_at="2024-05-10T12:30:00Z"),
        ]))

        with patch("adstudio.cli.experiments.ExperimentService", return_value=service):
            result = runner.invoke(cli, ["experiments", "list"])

        assert result.exit_code == 0, result.output
        assert "CTA test" in result.output
        assert "2h 30m" in result.output

    def test_metrics(self, runner):
        variants = [
            {"creative_id": 1, "impressions": 100, "clicks": 10},
            {"creative_id": 2, "impressions": 50, "clicks": 10},
        ]
        report = ExperimentReport(
            metrics=ExperimentMetrics(experiment_id="e1", variants=variants),
            summary=MetricsAggregator.summarize(variants),
            rows=MetricsAggregator.annotate(variants),
        )
        service = MagicMock()
        service.report = AsyncMock(return_value=report)

        with patch("adstudio.cli.experiments.ExperimentService", return_value=service):
            result = runner.invoke(cli, ["experiments", "metrics", "e1"])

        assert result.exit_code == 0, result.output
        assert "Average CTR: 13.33%" in result.output
        assert "below average by 3.33%" in result.output
        assert "Best variant: 2" in result.output

    def test_metrics_without_data(self, runner):
        service = MagicMock()
        service.report = AsyncMock(return_value=ExperimentReport(
            metrics=ExperimentMetrics(experiment_id="e1"), summary=None,
        ))

        with patch("adstudio.cli.experiments.ExperimentService", return_value=service):
            result = runner.invoke(cli, ["experiments", "metrics", "e1"])

        assert "No metrics yet" in result.output


class TestGenerateCommand:

    def _service(self):
        service = MagicMock()
        service.generate_copywriting = AsyncMock(return_value=CopywritingCandidates(
            task_id="t1", cta_candidates=["Buy Now"], selling_point_candidates=["Light", "Waterproof"],
        ))
        service.confirm_copywriting = AsyncMock(return_value=TaskData(task_id="t1"))
        service.start_creative = AsyncMock(return_value=TaskData(task_id="t1", status="queued"))
        service.wait_for_task = AsyncMock(return_value=TaskDetail(task_id="t1", status="completed", progress=100))
        return service

    def test_runs_all_steps(self, runner):
        service = self._service()

        with patch("adstudio.cli.generate.CreativeService", return_value=service):
            result = runner.invoke(cli, [
                "generate", "--product", "Smart Watch Pro",
                "--sp-index", "0", "--sp-index", "1", "--variants", "3", "--wait",
            ])

        assert result.exit_code == 0, result.output
        assert "task t1" in result.output
        assert "Selling points: Light, Waterproof" in result.output
        confirm = service.confirm_copywriting.await_args.args[0]
        assert confirm.selected_sp_indexes == [0, 1]
        start = service.start_creative.await_args.args[0]
        assert start.num_variants == 3
        service.wait_for_task.assert_awaited_once_with("t1")

    def test_bad_index_exits_1(self, runner):
        with patch("adstudio.cli.generate.CreativeService", return_value=self._service()):
            result = runner.invoke(cli, ["generate", "--product", "Lamp", "--cta-index", "5"])

        assert result.exit_code == 1
        assert "out of range" in result.output
