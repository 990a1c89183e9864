"""
Tests for creative option building used by experiment variant pickers.
"""

from adstudio.core.models import Asset, TaskListItem
from adstudio.services.creative_options import (
    build_creative_options,
    defaults_for,
    filter_by_product,
    find_option,
    product_names,
)


def _task(task_id, product_name=None):
    return TaskListItem(id=task_id, status="completed", product_name=product_name)


def _asset(asset_id, **kwargs):
    return Asset(id=asset_id, **kwargs)


class TestProductNames:

    def test_unique_in_first_seen_order(self):
        tasks = [_task("1", "Watch"), _task("2", "Lamp"), _task("3", "Watch"), _task("4")]
        assert product_names(tasks) == ["Watch", "Lamp"]


class TestBuildCreativeOptions:

    def test_product_name_inherited_from_task(self):
        options = build_creative_options(
            [_task("t1", "Smart Watch Pro")],
            [_asset("a1", task_id="t1", public_url="https://cdn/a1.png")],
        )

        assert options[0].product_name == "Smart Watch Pro"
        assert options[0].label == "Smart Watch Pro (a1)"
        assert options[0].thumb == "https://cdn/a1.png"

    def test_numeric_task_id_matches_string_task_id(self):
        options = build_creative_options([_task("17", "Lamp")], [_asset("a1", task_id=17)])
        assert options[0].product_name == "Lamp"

    def test_title_preferred_for_label(self):
        options = build_creative_options([], [_asset("a1", title="Summer sale", product_name="Lamp")])
        assert options[0].label == "Summer sale (a1)"

    def test_fallback_label(self):
        options = build_creative_options([], [_asset("a9")])
        assert options[0].label == "Creative (a9)"
        assert options[0].product_name is None

    def test_image_url_preferred_for_thumb(self):
        options = build_creative_options([], [_asset("a1", image_url="https://img", public_url="https://pub")])
        assert options[0].thumb == "https://img"

    def test_assets_without_id_are_skipped(self):
        options = build_creative_options([], [_asset(""), _asset("a2")])
        assert [o.id for o in options] == ["a2"]

    def test_defaults_carried(self):
        options = build_creative_options([], [_asset("a1", cta_text="Buy", selling_points=["Light"])])
        defaults = options[0].defaults
        assert defaults.cta_text == "Buy"
        assert defaults.selling_points == ["Light"]


class TestLookups:

    def setup_method(self):
        self.options = build_creative_options(
            [],
            [
                _asset("1", product_name="Watch", cta_text="Buy Now"),
                _asset("2", product_name="Lamp"),
            ],
        )

    def test_filter_by_product(self):
        assert [o.id for o in filter_by_product(self.options, "Watch")] == ["1"]

    def test_filter_without_product_returns_all(self):
        assert len(filter_by_product(self.options, "")) == 2
        assert len(filter_by_product(self.options, None)) == 2

    def test_find_option_by_int_id(self):
        assert find_option(self.options, 1).id == "1"
        assert find_option(self.options, 99) is None

    def test_defaults_for_unknown_creative_is_empty(self):
        defaults = defaults_for(self.options, "missing")
        assert defaults.cta_text is None
        assert defaults.selling_points == []

    def test_defaults_for_known_creative(self):
        assert defaults_for(self.options, "1").cta_text == "Buy Now"
