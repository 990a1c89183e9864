"""
Task commands for AdStudio CLI
"""

from typing import Optional

import click

from ..services.creative_service import CreativeService
from .common import run_with_client


@click.group('tasks')
def tasks_group():
    """Creative generation tasks"""
    pass


@tasks_group.command('list')
@click.option('--status', default=None, help='Filter by status (pending, processing, completed, ...)')
@click.option('--page', default=1, show_default=True, type=int)
@click.option('--page-size', default=20, show_default=True, type=int)
def list_tasks(status: Optional[str], page: int, page_size: int):
    """
    List creative tasks.

    Examples:
        adstudio tasks list
        adstudio tasks list --status completed --page-size 50
    """
    result = run_with_client(
        lambda client: CreativeService(client).list_tasks(page=page, page_size=page_size, status=status)
    )

    if not result.tasks:
        click.echo("No tasks found")
        return

    click.echo(f"Tasks (page {result.page}/{max(result.total_pages, 1)}, {result.total} total):\n")
    for task in result.tasks:
        name = task.product_name or task.title or '-'
        click.echo(f"  {task.id}  {task.status.value:<10} {task.progress:>3}%  {name}")
        if task.error_message:
            click.echo(f"      error: {task.error_message}")
