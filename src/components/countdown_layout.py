"""Countdown layout engine.

Computes absolute draw positions for one frame from measured text metrics.
The result is a plain value object; nothing here draws or keeps state, so
every frame of an animation gets its own freshly computed plan.
"""

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional, Protocol, Tuple

from src.components.countdown_fonts import DEFAULT_FAMILY, FontSpec
from src.utils.time_utils import DurationParts, pad

UNIT_WORDS = ('days', 'hours', 'minutes', 'seconds')

# Canonical strings used to measure value heights. Heights come from these
# rather than the rendered digits so the row never jumps vertically when a
# digit count changes (e.g. 9 days -> 10 days).
VALUE_HEIGHT_SAMPLES = ('888', '88', '88', '88')


class TextMetrics(NamedTuple):
    width: float
    ascent: float
    descent: float


class TextMeasurer(Protocol):
    def measure_text(self, text: str, font: FontSpec) -> TextMetrics:
        ...


@dataclass(frozen=True)
class LayoutStyle:
    """Canvas size, font sizes and spacing for the countdown graphic."""
    canvas_width: int = 600
    canvas_height: int = 220
    padding: int = 24
    accent_height: int = 6
    label_size: int = 26
    value_size: int = 56
    unit_size: int = 20
    sub_size: int = 18
    label_value_gap: int = 24
    value_sub_gap: int = 24
    value_unit_gap: int = 8
    segment_gap: int = 24
    # Extra breathing room between the segment row and the sub-label
    sub_extra_offset: int = 4
    label_family: str = DEFAULT_FAMILY
    value_family: str = DEFAULT_FAMILY
    unit_words: Tuple[str, ...] = UNIT_WORDS

    @property
    def label_font(self) -> FontSpec:
        return FontSpec(self.label_family, self.label_size)

    @property
    def value_font(self) -> FontSpec:
        return FontSpec(self.value_family, self.value_size)

    @property
    def unit_font(self) -> FontSpec:
        return FontSpec(self.value_family, self.unit_size)

    @property
    def sub_font(self) -> FontSpec:
        return FontSpec(self.value_family, self.sub_size)


DEFAULT_STYLE = LayoutStyle()


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TextPlacement:
    """Text anchored at its top-center point."""
    text: str
    x: float
    y: float
    font: FontSpec


@dataclass(frozen=True)
class Segment:
    value: str
    unit: str
    width: float
    height: float
    value_height: float


@dataclass(frozen=True)
class LayoutPlan:
    width: int
    height: int
    background: Rect
    accent_bar: Rect
    label: TextPlacement
    segments: Tuple[Segment, ...]
    values: Tuple[TextPlacement, ...]
    units: Tuple[TextPlacement, ...]
    sub_label: Optional[TextPlacement] = None

    def text_placements(self) -> Iterator[TextPlacement]:
        """Yield text placements in draw order."""
        yield self.label
        for value, unit in zip(self.values, self.units):
            yield value
            yield unit
        if self.sub_label is not None:
            yield self.sub_label


def text_height(metrics: TextMetrics, nominal_size: int) -> float:
    """Visual height of measured text; measurers that report no ascent fall back to the font size."""
    return (metrics.ascent or nominal_size) + (metrics.descent or 0)


def segment_values(parts: DurationParts) -> Tuple[str, str, str, str]:
    return str(parts.days), pad(parts.hours), pad(parts.minutes), pad(parts.seconds)


def compute_layout(measurer: TextMeasurer,
                   label: str,
                   sub_label: str,
                   parts: DurationParts,
                   style: LayoutStyle = DEFAULT_STYLE) -> LayoutPlan:
    """Compute the draw positions for one countdown frame.

    Args:
        measurer: Capability that returns text metrics for a font
        label: Headline drawn above the segments
        sub_label: Optional line drawn below the segments ('' for none)
        parts: Remaining time shown by this frame
        style: Canvas and typography parameters

    Returns:
        LayoutPlan with absolute anchors for every text element
    """
    width, height = style.canvas_width, style.canvas_height

    label_height = text_height(measurer.measure_text(label, style.label_font), style.label_size)

    segments = []
    for value, unit, sample in zip(segment_values(parts), style.unit_words, VALUE_HEIGHT_SAMPLES):
        value_height = text_height(measurer.measure_text(sample, style.value_font), style.value_size)
        value_width = measurer.measure_text(value, style.value_font).width

        unit_metrics = measurer.measure_text(unit, style.unit_font)
        unit_height = text_height(unit_metrics, style.unit_size)

        segments.append(Segment(
            value=value,
            unit=unit,
            width=max(value_width, unit_metrics.width),
            height=value_height + style.value_unit_gap + unit_height,
            value_height=value_height,
        ))

    row_width = sum(seg.width for seg in segments) + style.segment_gap * (len(segments) - 1)

    sub_height = 0.0
    if sub_label:
        sub_height = text_height(measurer.measure_text(sub_label, style.sub_font), style.sub_size)

    max_segment_height = max(seg.height for seg in segments)
    total_height = label_height + style.label_value_gap + max_segment_height
    if sub_label:
        total_height += style.value_sub_gap + sub_height

    start_y = max(style.padding, (height - style.accent_height - total_height) / 2)
    value_y = start_y + label_height + style.label_value_gap

    values = []
    units = []
    current_x = (width - row_width) / 2
    for seg in segments:
        center_x = current_x + seg.width / 2
        values.append(TextPlacement(seg.value, center_x, value_y, style.value_font))
        units.append(TextPlacement(seg.unit, center_x, value_y + seg.value_height + style.value_unit_gap,
                                   style.unit_font))
        current_x += seg.width + style.segment_gap

    sub_placement = None
    if sub_label:
        sub_y = value_y + max_segment_height + style.value_sub_gap + style.sub_extra_offset
        sub_placement = TextPlacement(sub_label, width / 2, sub_y, style.sub_font)

    return LayoutPlan(
        width=width,
        height=height,
        background=Rect(0, 0, width, height),
        accent_bar=Rect(0, height - style.accent_height, width, style.accent_height),
        label=TextPlacement(label, width / 2, start_y, style.label_font),
        segments=tuple(segments),
        values=tuple(values),
        units=tuple(units),
        sub_label=sub_placement,
    )
