"""Tests for the countdown layout engine."""

import pytest

from src.components.countdown_layout import DEFAULT_STYLE, LayoutStyle, compute_layout, segment_values
from src.utils.time_utils import DurationParts

from tests.conftest import RecordingSurface


@pytest.fixture
def measurer():
    return RecordingSurface(600, 220)


@pytest.fixture
def sized_measurer():
    return RecordingSurface(600, 220, height_less=False)


class TestComputeLayout:

    def test_segment_values_are_padded(self):
        assert segment_values(DurationParts(1, 2, 3, 4)) == ('1', '02', '03', '04')

    def test_vertical_positions_without_sub_label(self, measurer):
        plan = compute_layout(measurer, 'Sale ends in', '', DurationParts(1, 0, 0, 0))

        # label 26 + gap 24 + segment (56 + 8 + 20) = 134 -> (220 - 6 - 134) / 2
        assert plan.label.y == 40
        assert all(value.y == 90 for value in plan.values)
        assert all(unit.y == 154 for unit in plan.units)
        assert plan.sub_label is None

    def test_horizontal_slots_are_centered(self, measurer):
        plan = compute_layout(measurer, 'Sale ends in', '', DurationParts(1, 0, 0, 0))

        assert [seg.width for seg in plan.segments] == [40, 56, 70, 70]
        assert [value.x for value in plan.values] == [166, 238, 325, 419]
        # value and unit share their slot center
        assert [unit.x for unit in plan.units] == [value.x for value in plan.values]
        assert plan.label.x == 300

    def test_block_never_above_padding(self, measurer):
        plan = compute_layout(measurer, 'Sale ends in', 'Shop now', DurationParts(1, 0, 0, 0))

        assert plan.label.y == DEFAULT_STYLE.padding
        assert plan.sub_label.text == 'Shop now'
        assert plan.sub_label.x == 300
        # value row 74 + segment 84 + gap 24 + extra 4
        assert plan.sub_label.y == 186

    def test_background_and_accent_bar(self, measurer):
        plan = compute_layout(measurer, 'Label', '', DurationParts(0, 0, 0, 0))

        assert (plan.background.width, plan.background.height) == (600, 220)
        assert plan.accent_bar.y == 214
        assert plan.accent_bar.height == 6

    def test_no_vertical_jitter_when_day_digits_grow(self, sized_measurer):
        before = compute_layout(sized_measurer, 'Label', 'Sub', DurationParts(9, 23, 59, 59))
        after = compute_layout(sized_measurer, 'Label', 'Sub', DurationParts(10, 0, 0, 0))

        assert [v.y for v in before.values] == [v.y for v in after.values]
        assert [u.y for u in before.units] == [u.y for u in after.units]
        assert before.sub_label.y == after.sub_label.y

    def test_draw_order(self, measurer):
        plan = compute_layout(measurer, 'Label', 'Sub', DurationParts(3, 4, 5, 6))

        texts = [placement.text for placement in plan.text_placements()]
        assert texts == ['Label', '3', 'days', '04', 'hours', '05', 'minutes', '06', 'seconds', 'Sub']

    def test_custom_style(self, measurer):
        style = LayoutStyle(canvas_width=400, canvas_height=300, label_family='Roboto')
        plan = compute_layout(measurer, 'Label', '', DurationParts(0, 0, 0, 0), style)

        assert plan.width == 400
        assert plan.label.font.family == 'Roboto'
        assert plan.label.x == 200
