"""
Word Cloud Layout Engine.

Assigns each ranked word a position, font size and colour on a
rectangular canvas so that no two word boxes overlap.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from src.models.word_cloud import WordFrequency, WordPosition
import config.settings as settings

logger = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    return f"{round(value, 2):g}"


class WordCloudLayoutEngine:
    """
    Deterministic spiral-then-grid word placement.

    Most frequent words are placed first, starting from the canvas centre
    and spiralling outwards. If the spiral finds no free slot, a
    left-to-right, top-to-bottom grid scan is tried. Words that fit nowhere
    are dropped.
    """

    def __init__(
        self,
        radius_step: float = 20,
        angle_step_degrees: int = 30,
        grid_step: float = 20,
        char_width_ratio: float = 0.6,
        horizontal_padding: float = 16,
        line_height_ratio: float = 1.4,
        vertical_padding: float = 8
    ):
        """
        Initialize layout engine.

        Args:
            radius_step: Spiral radius increment in pixels
            angle_step_degrees: Spiral angle increment
            grid_step: Grid scan step in pixels
            char_width_ratio: Average character width as a fraction of font size
            horizontal_padding: Extra width added to every word box
            line_height_ratio: Box height as a multiple of font size
            vertical_padding: Extra height added to every word box
        """
        self.radius_step = radius_step
        self.angle_step_degrees = angle_step_degrees
        self.grid_step = grid_step
        self.char_width_ratio = char_width_ratio
        self.horizontal_padding = horizontal_padding
        self.line_height_ratio = line_height_ratio
        self.vertical_padding = vertical_padding

    def layout(
        self,
        words: Sequence[WordFrequency],
        width: float,
        height: float,
        max_words: int = settings.WORD_CLOUD_MAX_WORDS
    ) -> List[WordPosition]:
        """
        Place up to max_words words on a width x height canvas.

        Args:
            words: Word frequencies in any order
            width: Canvas width in pixels
            height: Canvas height in pixels
            max_words: Maximum number of words to place

        Returns:
            Placed words, most frequent first. Empty for degenerate input.
        """
        if width <= 0 or height <= 0 or not words or max_words <= 0:
            return []

        ranked = sorted(words, key=lambda w: w.count, reverse=True)[:max_words]
        max_count = max(w.count for w in ranked)
        min_count = min(w.count for w in ranked)
        count_range = (max_count - min_count) or 1

        min_font = max(12, width * 0.02)
        max_font = max(28, width * 0.06)

        placed: List[WordPosition] = []
        for word in ranked:
            ratio = (word.count - min_count) / count_range
            font_size = min_font + ratio * (max_font - min_font)
            box_width, box_height = self.estimate_box(word.word, font_size)

            position = self._find_position(box_width, box_height, width, height, placed)
            if position is None:
                logger.debug(f"No room for '{word.word}' ({box_width:.0f}x{box_height:.0f}), dropping")
                continue

            x, y = position
            placed.append(WordPosition(
                word=word.word,
                count=word.count,
                x=x,
                y=y,
                width=box_width,
                height=box_height,
                font_size=font_size,
                color=self.color_for(ratio)
            ))

        logger.debug(f"Placed {len(placed)}/{len(ranked)} words on {width}x{height} canvas")
        return placed

    def estimate_box(self, text: str, font_size: float) -> Tuple[float, float]:
        """Approximate text box from character count; not real font metrics."""
        box_width = len(text) * self.char_width_ratio * font_size + self.horizontal_padding
        box_height = font_size * self.line_height_ratio + self.vertical_padding
        return box_width, box_height

    @staticmethod
    def color_for(ratio: float) -> str:
        """Blue-to-purple gradient, lightest at mid frequency."""
        hue = 200 + ratio * 60
        saturation = 60 + ratio * 20
        lightness = 45 + math.sin(ratio * math.pi) * 10
        return (
            f"hsl({_format_number(hue)}, "
            f"{_format_number(saturation)}%, "
            f"{_format_number(lightness)}%)"
        )

    @staticmethod
    def _is_free(
        x: float,
        y: float,
        box_width: float,
        box_height: float,
        canvas_width: float,
        canvas_height: float,
        placed: List[WordPosition]
    ) -> bool:
        if x < 0 or y < 0 or x + box_width > canvas_width or y + box_height > canvas_height:
            return False

        for other in placed:
            separated = (
                x > other.x + other.width
                or x + box_width < other.x
                or y > other.y + other.height
                or y + box_height < other.y
            )
            if not separated:
                return False
        return True

    def _find_position(
        self,
        box_width: float,
        box_height: float,
        canvas_width: float,
        canvas_height: float,
        placed: List[WordPosition]
    ) -> Optional[Tuple[float, float]]:
        center_x = canvas_width / 2
        center_y = canvas_height / 2
        max_radius = max(canvas_width, canvas_height) / 2

        radius = 0.0
        while radius < max_radius:
            for angle in range(0, 360, self.angle_step_degrees):
                theta = angle * math.pi / 180
                x = center_x + radius * math.cos(theta) - box_width / 2
                y = center_y + radius * math.sin(theta) - box_height / 2
                if self._is_free(x, y, box_width, box_height, canvas_width, canvas_height, placed):
                    return x, y
                if radius == 0:
                    # Every angle maps to the centre
                    break
            radius += self.radius_step

        y = 0.0
        while y <= canvas_height - box_height:
            x = 0.0
            while x <= canvas_width - box_width:
                if self._is_free(x, y, box_width, box_height, canvas_width, canvas_height, placed):
                    return x, y
                x += self.grid_step
            y += self.grid_step

        return None


def calculate_word_cloud_layout(
    words: Sequence[WordFrequency],
    width: float,
    height: float,
    max_words: int = settings.WORD_CLOUD_MAX_WORDS
) -> List[WordPosition]:
    """Lay out words with the default engine settings."""
    return WordCloudLayoutEngine().layout(words, width, height, max_words)
