"""Prompt assembly for quote generation requests.

This module is intentionally narrow: it only builds prompt strings from a theme
and the list of quotes the user already liked. Backend selection, randomized
embellishments, payload encoding, and model invocation happen outside this
module.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering of prompt components.
    - No hidden side effects (no I/O, no randomness, no global state mutation).

Prompt safety model:
    - Liked quotes are interpolated verbatim as untrusted text.
    - Safety is instruction-led, not parser-enforced.
"""

from typing import Sequence


DEFAULT_MAX_WORDS = 10


# =========================================================
# BASE INSTRUCTION
# =========================================================
# Component order:
#   1) Theme sentence (explicit theme or "a random theme")
#   2) Length ceiling
#   3) Single-idea constraint

def build_base_instruction(theme: str | None, max_words: int = DEFAULT_MAX_WORDS) -> str:
    """Build the theme and length instruction shared by every request.

    Edge cases:
        - `None`, empty, and whitespace-only themes all select "a random theme".
        - The theme is stripped before insertion.
    """
    theme = (theme or "").strip()

    if theme:
        opening = f"Provide a short, compelling quote that embodies the themes of {theme}."
    else:
        opening = "Provide a short, compelling quote that uses a random theme."

    return (
        opening +
        f" Keep it under {max_words} words."
        " Only express one concept; do not combine ideas."
    )


# =========================================================
# LIKED HISTORY
# =========================================================
# Adaptive feedback block, appended only when the user accepted something.
# Each quote is listed as `<n>. "<text>"`, numbered from 1 in input order.
# Inner whitespace (including line breaks) is collapsed so one quote is one line.

def build_history_instruction(liked_history: Sequence[str]) -> str:
    """Build the secondary instruction listing previously accepted quotes.

    Returns:
        Empty string for empty history, otherwise the numbered block followed
        by the similarity requirement.
    """
    if not liked_history:
        return ""

    listing = "\n".join(
        f'{i + 1}. "{" ".join(quote.split())}"'
        for i, quote in enumerate(liked_history)
    )

    return (
        "The user liked these previous quotes:\n"
        + listing +
        "\nWrite a new quote that is stylistically similar to these,"
        " but not identical to any of them."
    )


def build_quote_prompt(
    theme: str | None,
    liked_history: Sequence[str] = (),
    max_words: int = DEFAULT_MAX_WORDS,
) -> str:
    """Build the full instruction text for one generation request.

    Args:
        theme: Optional theme supplied on the command line.
        liked_history: Accepted quotes, oldest first.
        max_words: Word-count ceiling stated in the instruction.

    Returns:
        Prompt string. Identical arguments always produce identical output.
    """
    prompt = build_base_instruction(theme, max_words)

    history_block = build_history_instruction(liked_history)
    if history_block:
        prompt += "\n\n" + history_block

    return prompt
