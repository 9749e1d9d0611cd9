"""Text normalization for trigger matching."""
import unicodedata
from typing import List


def _is_letter(char: str) -> bool:
    return unicodedata.category(char).startswith("L")


def normalize(text: str) -> List[str]:
    """Split text into lowercase tokens made of Unicode letters only.

    Any run of non-letter code points (digits, punctuation, spaces, emoji)
    is a separator.

    Examples:
        >>> normalize("Погода, please!")
        ['погода', 'please']
        >>> normalize("")
        []
    """
    tokens: List[str] = []
    current: List[str] = []
    for char in text or "":
        if _is_letter(char):
            current.append(char)
        elif current:
            tokens.append("".join(current).lower())
            current = []
    if current:
        tokens.append("".join(current).lower())
    return tokens
