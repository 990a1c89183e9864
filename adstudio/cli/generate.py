"""
Generate command for AdStudio CLI

Runs the three-step creative workflow non-interactively.
"""

from typing import Optional, Tuple

import click

from ..core.config import Config
from ..core.models import LanguageOption
from ..pipelines.creative_workflow import CreativeWorkflow
from ..services.creative_service import CreativeService
from .common import run_with_client


@click.command('generate')
@click.option('--product', 'product_name', required=True, help='Product name')
@click.option('--language', type=click.Choice([opt.value for opt in LanguageOption]),
              default=Config.DEFAULT_LANGUAGE, show_default=True, help='Copywriting language')
@click.option('--cta-index', default=0, show_default=True, type=int, help='Candidate CTA to use')
@click.option('--sp-index', 'sp_indexes', multiple=True, type=int,
              help='Candidate selling point to use (repeatable, default: first)')
@click.option('--cta', 'edited_cta', default=None, help='Custom CTA text (overrides --cta-index)')
@click.option('--image-url', default=None, help='Product image URL')
@click.option('--style', default=None, help='Global image style')
@click.option('--variants', default=Config.DEFAULT_NUM_VARIANTS, show_default=True, type=int)
@click.option('--format', 'formats', multiple=True, help='Output format, e.g. 1:1 (repeatable)')
@click.option('--wait', is_flag=True, help='Poll the task until it finishes')
def generate_command(
    product_name: str,
    language: str,
    cta_index: int,
    sp_indexes: Tuple[int, ...],
    edited_cta: Optional[str],
    image_url: Optional[str],
    style: Optional[str],
    variants: int,
    formats: Tuple[str, ...],
    wait: bool,
):
    """
    Generate copywriting and start creative generation for a product.

    Examples:
        adstudio generate --product "Smart Watch Pro"
        adstudio generate --product "Smart Watch Pro" --sp-index 0 --sp-index 1 --variants 3 --wait
    """

    async def _run(client):
        service = CreativeService(client)
        workflow = CreativeWorkflow(service)

        click.echo(f"⏳ Generating copywriting for '{product_name}'...")
        candidates = await workflow.generate_candidates(product_name, language)
        for i, cta in enumerate(candidates.cta_candidates):
            click.echo(f"   CTA {i}: {cta}")
        for i, point in enumerate(candidates.selling_point_candidates):
            click.echo(f"   SP  {i}: {point}")

        workflow.select_cta(cta_index)
        if sp_indexes:
            workflow.set_selected_selling_points(sp_indexes)
        workflow.edit_cta(edited_cta)
        workflow.configure(
            product_image_url=image_url,
            style=style,
            formats=list(formats) if formats else None,
            num_variants=variants,
        )

        summary = workflow.summary()
        click.echo(f"\n✅ CTA: {summary.cta or '(pending)'}")
        click.echo(f"   Selling points: {', '.join(summary.selling_points) or '(pending)'}")

        await workflow.confirm_copywriting()
        started = await workflow.start_creative()
        click.echo(f"\n🎨 Creative generation started: task {started.task_id}")

        if wait:
            click.echo("⏳ Waiting for the task to finish...")
            detail = await service.wait_for_task(started.task_id)
            click.echo(f"   Status: {detail.status.value} ({detail.progress}%)")
            if detail.error:
                click.echo(f"   Error: {detail.error}", err=True)
            for creative in detail.creatives:
                click.echo(f"   {creative.format:<6} {creative.image_url}")
        return started

    run_with_client(_run)
