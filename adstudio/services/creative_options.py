"""
Creative options for experiment variant pickers.

Asset records are folded into selectable options. An asset that does not
carry its product name inherits it from the task that produced it.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..core.models import Asset, CreativeDefaults, CreativeId, TaskListItem

logger = logging.getLogger(__name__)

FALLBACK_LABEL = "Creative"


@dataclass
class CreativeOption:
    """A creative as offered in a variant picker"""
    id: str
    label: str
    thumb: Optional[str] = None
    product_name: Optional[str] = None
    cta_text: Optional[str] = None
    selling_points: List[str] = field(default_factory=list)
    title: Optional[str] = None

    @property
    def defaults(self) -> CreativeDefaults:
        return CreativeDefaults(cta_text=self.cta_text, selling_points=list(self.selling_points))


def product_names(tasks: Iterable[TaskListItem]) -> List[str]:
    """Unique product names in first-seen order."""
    names: List[str] = []
    for task in tasks:
        if task.product_name and task.product_name not in names:
            names.append(task.product_name)
    return names


def build_creative_options(
    tasks: Iterable[TaskListItem],
    assets: Iterable[Asset],
) -> List[CreativeOption]:
    """
    Fold assets into options.

    Args:
        tasks: Task rows, used to resolve missing product names
        assets: Asset rows

    Returns:
        One option per asset with a non-empty id, in asset order
    """
    task_products: Dict[str, str] = {
        str(task.id): task.product_name for task in tasks if task.id and task.product_name
    }

    options = []
    for asset in assets:
        if not asset.id:
            continue
        product = asset.product_name
        if not product and asset.task_id is not None:
            product = task_products.get(str(asset.task_id))
        label = asset.title or product or FALLBACK_LABEL
        options.append(CreativeOption(
            id=str(asset.id),
            label=f"{label} ({asset.id})",
            thumb=asset.image_url or asset.public_url or None,
            product_name=product,
            cta_text=asset.cta_text,
            selling_points=list(asset.selling_points or []),
            title=asset.title,
        ))

    logger.debug(f"Built {len(options)} creative options")
    return options


def filter_by_product(options: Iterable[CreativeOption], product_name: Optional[str]) -> List[CreativeOption]:
    """Options belonging to a product; all options when no product is given."""
    wanted = (product_name or "").strip()
    if not wanted:
        return list(options)
    return [opt for opt in options if (opt.product_name or "").strip() == wanted]


def find_option(options: Iterable[CreativeOption], creative_id: CreativeId) -> Optional[CreativeOption]:
    key = str(creative_id)
    for opt in options:
        if opt.id == key:
            return opt
    return None


def defaults_for(options: Iterable[CreativeOption], creative_id: CreativeId) -> CreativeDefaults:
    """Stored CTA/selling points of a creative; empty defaults when unknown."""
    opt = find_option(options, creative_id)
    return opt.defaults if opt else CreativeDefaults()
