import random
from typing import NamedTuple


class Color(NamedTuple):
    red: int
    green: int
    blue: int

    def name(self) -> str:
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"


# Handed out in this order before falling back to random colors.
ORDINAL_COLORS = [
    Color(255, 255, 255),  # white
    Color(0, 0, 0),        # black
    Color(255, 0, 0),      # red
    Color(0, 255, 0),      # green
    Color(0, 0, 255),      # blue
    Color(0, 255, 255),    # cyan
    Color(255, 0, 255),    # magenta
    Color(255, 255, 0),    # yellow
    Color(160, 160, 164),  # gray
    Color(128, 0, 0),      # dark red
    Color(0, 128, 0),      # dark green
    Color(0, 0, 128),      # dark blue
    Color(0, 128, 128),    # dark cyan
    Color(128, 0, 128),    # dark magenta
    Color(128, 128, 0),    # dark yellow
    Color(128, 128, 128),  # dark gray
    Color(192, 192, 192),  # light gray
]


class ColorAssigner:
    """
    One color per distinct fingerprint, in first-seen order.
    Ids index into `colors`; the same fingerprint always gets the same id for the lifetime of the instance.
    """
    def __init__(self, seed=None):
        self.ids: dict[bytes, int] = {}
        self.colors: list[Color] = []
        self._used: set[Color] = set()
        self._rand = random.Random(seed)

    def __len__(self):
        return len(self.colors)

    def color_id_for(self, fingerprint: bytes) -> int:
        if fingerprint is None:
            raise ValueError("unresolved fingerprint has no color")
        color_id = self.ids.get(fingerprint)
        if color_id is None:
            color_id = len(self.colors)
            self.ids[fingerprint] = color_id
            color = self._next_color()
            self.colors.append(color)
            self._used.add(color)
        return color_id

    def color_for(self, fingerprint: bytes) -> Color:
        return self.colors[self.color_id_for(fingerprint)]

    def _next_color(self) -> Color:
        n = len(self.colors)
        if n < len(ORDINAL_COLORS):
            return ORDINAL_COLORS[n]
        while True:
            c = Color(self._rand.randrange(255), self._rand.randrange(255), self._rand.randrange(255))
            if c not in self._used:
                return c
