"""Shared request/response helpers used by every backend.

Architectural role:
    Holds the pieces of quote generation that are common across providers but
    do not belong in the deterministic prompt builder: call-time randomized
    embellishments and normalization of returned text.

Determinism:
    `pick_embellishments` is random unless a seeded `random.Random` is passed.
    `embellish_prompt` and `clean_quote` are pure.
"""

import random
import string


# Topics a backend may ask the model to draw inspiration from.
INSPIRATIONS = (
    "science",
    "philosophy",
    "nature",
    "history",
    "mythology",
    "technology",
    "art",
    "literature",
    "music",
    "psychology",
    "astronomy",
    "economics",
    "engineering",
    "spirituality",
    "sociology",
    "biology",
    "geography",
    "politics",
    "architecture",
    "medicine",
)


def pick_embellishments(rng: random.Random | None = None) -> tuple[str, str]:
    """Return a random `(inspiration, starting_letter)` pair."""
    rng = rng or random
    return rng.choice(INSPIRATIONS), rng.choice(string.ascii_uppercase)


def embellish_prompt(prompt: str, inspiration: str, letter: str) -> str:
    """Append inspiration and starting-letter instructions to `prompt`."""
    return (
        prompt +
        f"\nDraw inspiration from {inspiration}."
        f" The first word of the quote should start with the letter {letter}."
    )


def clean_quote(text: str) -> str:
    """Strip surrounding whitespace and one layer of enclosing double quotes.

    Edge cases:
        - Only a matching pair is removed: `'"a"'` -> `'a'`, `'""a""'` -> `'"a"'`.
        - A lone leading or trailing quote is kept.
    """
    text = text.strip()
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1].strip()
    return text
