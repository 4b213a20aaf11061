"""Entrant names and colours for a race field."""

import re

from derbysim.rng import RandomSource, default_rng

TOKEN_RE = re.compile(r"\[([A-Za-z]+)\]")

PATTERNS = (
    "[Adjective] [Noun]",
    "[Adjective] [Noun]",
    "[Noun] of [Place]",
    "[Place] [Noun]",
    "Sir [Noun]",
    "Lady [Noun]",
)

LEXICON = {
    "Adjective": [
        "Midnight", "Golden", "Silver", "Thunder", "Lucky", "Wild", "Swift",
        "Crimson", "Rolling", "Dancing", "Brave", "Velvet", "Copper", "Stormy",
    ],
    "Noun": [
        "Comet", "Arrow", "Gambit", "Echo", "Blaze", "Rebel", "Mirage",
        "Dancer", "Spirit", "Harbor", "Legend", "Whisper", "Outlaw", "Banner",
    ],
    "Place": [
        "Kentucky", "Ascot", "Galway", "Saratoga", "Epsom", "Aintree",
        "Belmont", "Dublin", "Santa Anita", "Longchamp",
    ],
}

DEFAULT_COLORS = (
    0xE6194B, 0x3CB44B, 0xFFE119, 0x4363D8, 0xF58231, 0x911EB4,
    0x46F0F0, 0xF032E6, 0xBCF60C, 0xFABEBE, 0x008080, 0x9A6324,
)


def _pick(pool: list[str], rng: RandomSource) -> str:
    return pool[int(rng.integers(0, len(pool)))]


def generate_name(rng: RandomSource | None = None) -> str:
    """Generate a single race name."""
    rng = rng if rng is not None else default_rng()
    pattern = _pick(list(PATTERNS), rng)
    return TOKEN_RE.sub(lambda m: _pick(LEXICON[m.group(1)], rng), pattern)


def generate_names(count: int, rng: RandomSource | None = None) -> list[str]:
    """Generate distinct names for a field.

    Args:
        count: Number of names
        rng: Random source

    Returns:
        List of unique names
    """
    rng = rng if rng is not None else default_rng()
    names: list[str] = []
    attempts = 0
    while len(names) < count:
        name = generate_name(rng)
        attempts += 1
        if name in names:
            # Lexicon exhausted for this pattern mix; number the duplicate
            if attempts > count * 20:
                name = f"{name} {len(names) + 1}"
            else:
                continue
        names.append(name)
    return names


def default_colors(count: int) -> list[int]:
    """Colours for a field, cycling the palette when it runs out."""
    return [DEFAULT_COLORS[i % len(DEFAULT_COLORS)] for i in range(count)]
