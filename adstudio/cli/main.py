"""
Main CLI entry point for AdStudio
"""

import logging

import click

from .. import __version__
from ..core.observability import setup_logfire
from .experiments import experiments_group
from .generate import generate_command
from .tasks import tasks_group


@click.group()
@click.version_option(version=__version__)
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """
    AdStudio - AI ad creative generation and A/B testing

    Generate ad creatives from product copywriting, browse tasks and
    compare experiment variants.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    setup_logfire()


# Register command groups
cli.add_command(tasks_group)
cli.add_command(experiments_group)
cli.add_command(generate_command)


if __name__ == '__main__':
    cli()
