"""Theme prompts the host can draw from"""

import random
from typing import List, Optional, Protocol, Sequence

THEMES: List[str] = [
    "Things that are scary (1 = not scary at all, 100 = terrifying)",
    "Popular foods (1 = nobody likes it, 100 = everyone loves it)",
    "Animal strength (1 = weakest, 100 = strongest)",
    "Things you'd want on a desert island (1 = useless, 100 = essential)",
    "Sizes of things (1 = tiny, 100 = enormous)",
    "Superpowers (1 = useless, 100 = amazing)",
    "Things that make you happy (1 = a little, 100 = overjoyed)",
    "Travel destinations (1 = never going, 100 = dream trip)",
    "Expensive things (1 = cheap, 100 = priceless)",
    "Famous people's popularity (1 = unknown, 100 = superstar)",
    "Things that are hot (1 = cold, 100 = scorching)",
    "Things you'd do on a day off (1 = never, 100 = every time)",
    "Movie genres (1 = boring, 100 = thrilling)",
    "School subjects (1 = dreaded, 100 = favourite)",
    "Weapons in a zombie apocalypse (1 = useless, 100 = best choice)",
    "Gifts (1 = disappointing, 100 = perfect)",
    "Things that are heavy (1 = feather light, 100 = crushing)",
    "Jobs (1 = nobody wants it, 100 = dream job)",
    "Smells (1 = awful, 100 = wonderful)",
    "Things that are loud (1 = silent, 100 = deafening)",
]


class ThemeSource(Protocol):
    def pick_random(self) -> str:
        ...


class RandomThemeSource:
    """Picks prompts uniformly from a static list."""

    def __init__(self, themes: Sequence[str] = THEMES, seed: Optional[int] = None):
        if not themes:
            raise ValueError("Theme list must not be empty")
        self.themes = list(themes)
        self._rng = random.Random(seed)

    def pick_random(self) -> str:
        return self._rng.choice(self.themes)
