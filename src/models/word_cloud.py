"""
Word cloud data models.

Word frequencies feed the layout engine; word positions are its output.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WordFrequency:
    """A word and how many times it occurred."""
    word: str
    count: int

    def __post_init__(self):
        if self.count < 1:
            raise ValueError(f"Invalid count for '{self.word}': {self.count}. Must be >= 1")

    def to_dict(self) -> dict:
        return {"word": self.word, "count": self.count}


@dataclass(frozen=True)
class WordPosition:
    """
    Placement of one word on the canvas.
    x, y are the top-left corner of the estimated bounding box.
    """
    word: str
    count: int
    x: float
    y: float
    width: float
    height: float
    font_size: float
    color: str  # hsl(...) string

    def overlaps(self, other: "WordPosition") -> bool:
        """Axis-aligned bounding-box intersection (touching edges count)."""
        return not (
            self.x > other.x + other.width
            or self.x + self.width < other.x
            or self.y > other.y + other.height
            or self.y + self.height < other.y
        )

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "count": self.count,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "font_size": self.font_size,
            "color": self.color
        }
