"""Tests for animation group authoring."""

import pytest

from slideplay.application.builder import AnimationBuilder
from slideplay.domain.entities.slide import AnimationGroup


class TestAnimationBuilder:
    """Test cases for AnimationBuilder."""

    @pytest.fixture
    def builder(self, channel, surface_host, deck):
        return AnimationBuilder(channel, surface_host.resolve, deck)

    @pytest.fixture
    def on_slide_one(self, builder, surface_host, deck):
        surface_host.render(1, deck.get(1).markup)
        builder.scan(1)
        return builder

    @pytest.fixture
    def on_slide_two(self, builder, surface_host, deck):
        surface_host.render(2, deck.get(2).markup)
        builder.scan(2)
        return builder

    def test_scan_lists_selectable_elements(self, on_slide_one):
        assert on_slide_one.selectable_elements == ["title", "first", "second", "third"]

    def test_scan_assigns_missing_build_ids(self, builder, surface_host):
        surface_host.render(5, "<div class='slide'><h2>Plain</h2><li>Point</li></div>")
        elements = builder.scan(5)
        assert len(elements) == 2
        assert elements[0].startswith("h2-")
        assert elements[1].startswith("li-")

    def test_scan_without_surface(self, builder):
        assert builder.scan(1) == []

    def test_toggle_selection(self, on_slide_one):
        assert on_slide_one.toggle_element("first") is True
        assert on_slide_one.toggle_element("third") is True
        assert on_slide_one.selected == ["first", "third"]
        on_slide_one.toggle_element("first")
        assert on_slide_one.selected == ["third"]

    def test_toggle_unknown_element(self, on_slide_one):
        assert on_slide_one.toggle_element("missing") is False
        assert on_slide_one.selected == []

    def test_scanning_another_slide_clears_selection(self, on_slide_one, surface_host, deck):
        on_slide_one.toggle_element("first")
        surface_host.render(2, deck.get(2).markup)
        on_slide_one.scan(2)
        assert on_slide_one.selected == []

    @pytest.mark.asyncio
    async def test_create_group_appends_in_order(self, on_slide_two, channel, deck):
        on_slide_two.toggle_element("two")

        group = await on_slide_two.create_group()

        assert group == AnimationGroup(id="group-1", order=1, element_ids=("two",))
        assert deck.get(2).animation_groups == [group]
        assert on_slide_two.selected == []

        saves = channel.sent_of_type("save-animations")
        assert len(saves) == 1
        assert saves[0].slide_number == 2
        assert saves[0].to_wire()["groups"] == [
            {"id": "group-1", "order": 1, "elementIds": ["two"]}
        ]

    @pytest.mark.asyncio
    async def test_create_group_needs_a_selection(self, on_slide_two, channel):
        assert await on_slide_two.create_group() is None
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_create_group_after_existing(self, on_slide_one):
        on_slide_one.toggle_element("title")
        group = await on_slide_one.create_group()
        assert group.order == 4
        assert group.id == "group-4"

    @pytest.mark.asyncio
    async def test_group_id_avoids_collisions(self, on_slide_two, deck):
        deck.set_animation_groups(2, [AnimationGroup(id="group-2", order=1, element_ids=("two",))])
        on_slide_two.toggle_element("two")

        group = await on_slide_two.create_group()

        assert group.order == 2
        assert group.id == "group-3"

    @pytest.mark.asyncio
    async def test_delete_group_renumbers(self, on_slide_one, deck, channel):
        assert await on_slide_one.delete_group("g2") is True

        groups = deck.get(1).animation_groups
        assert [(g.id, g.order) for g in groups] == [("g1", 1), ("g3", 2)]
        assert len(channel.sent_of_type("save-animations")) == 1

    @pytest.mark.asyncio
    async def test_delete_unknown_group(self, on_slide_one, channel):
        assert await on_slide_one.delete_group("nope") is False
        assert channel.sent == []

    def test_reset(self, on_slide_one):
        on_slide_one.toggle_element("first")
        on_slide_one.reset()
        assert on_slide_one.slide_number is None
        assert on_slide_one.groups() == []
        assert on_slide_one.selected == []
