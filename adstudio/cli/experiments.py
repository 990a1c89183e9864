"""
Experiment commands for AdStudio CLI
"""

from typing import Optional

import click

from ..services.experiment_service import ExperimentService
from ..services.metrics_service import format_duration
from .common import format_ctr, run_with_client


@click.group('experiments')
def experiments_group():
    """A/B experiments"""
    pass


@experiments_group.command('list')
@click.option('--status', default=None, help='Filter by status (draft, active, paused, archived)')
@click.option('--page', default=1, show_default=True, type=int)
@click.option('--page-size', default=50, show_default=True, type=int)
def list_experiments(status: Optional[str], page: int, page_size: int):
    """List experiments with their running time."""
    result = run_with_client(
        lambda client: ExperimentService(client).list(page=page, page_size=page_size, status=status)
    )

    if not result.experiments:
        click.echo("No experiments found")
        return

    for exp in result.experiments:
        duration = format_duration(exp.start_at, exp.end_at)
        product = f" [{exp.product_name}]" if exp.product_name else ""
        click.echo(
            f"  {exp.experiment_id}  {exp.status:<9} {duration:>7}  "
            f"{exp.name}{product} ({len(exp.variants)} variants)"
        )


@experiments_group.command('metrics')
@click.argument('experiment_id')
def show_metrics(experiment_id: str):
    """
    Show per-variant CTR, deviation from the average and the best variant.

    Examples:
        adstudio experiments metrics exp_123
    """
    report = run_with_client(lambda client: ExperimentService(client).report(experiment_id))

    if report.summary is None:
        click.echo(f"No metrics yet for experiment {experiment_id}")
        return

    summary = report.summary
    click.echo(f"\n📊 Experiment {experiment_id}")
    click.echo(
        f"   Impressions: {summary.impressions}  Clicks: {summary.clicks}  "
        f"Average CTR: {format_ctr(summary.avg_ctr)}\n"
    )

    for row in report.rows:
        marker = click.style('★ best', fg='green', bold=True) if row.is_best else ''
        click.echo(
            f"   {str(row.creative_id):<12} {row.impressions:>8} imp {row.clicks:>6} clk  "
            f"CTR {format_ctr(row.ctr):>7}  ({row.deviation.describe()}) {marker}".rstrip()
        )

    click.echo(f"\n   Best variant: {summary.best.creative_id}")
