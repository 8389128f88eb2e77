from enum import Enum


class Color(Enum):
    """Color of a single unit inside a container."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"
    PINK = "pink"
    CYAN = "cyan"
    BROWN = "brown"
    LIME = "lime"
    MAGENTA = "magenta"
    TEAL = "teal"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_name(cls, name: str) -> "Color":
        """Look up a color by its value or member name, case-insensitively."""
        key = name.strip().lower()
        for color in cls:
            if color.value == key:
                return color
        raise KeyError(name)
