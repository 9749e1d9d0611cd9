"""
Response pagination.

Splits a long response into chunks that fit one Telegram message,
preferring paragraph boundaries, then sentence boundaries, then
whitespace. When more than one chunk is produced each gets a
"part i of n" marker; the marker margin is always reserved, so a
labelled chunk never exceeds the limit.
"""
import re
from typing import List, Optional

from jester.core.constants import MAX_MESSAGE_LENGTH, PART_MARKER, PART_MARKER_MARGIN
from jester.models.schemas import ResponseChunk

PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_SEPARATOR = " "
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = (" ", "\n", "\t")


def _accumulate(pieces: List[str], separator: str, limit: int) -> List[str]:
    """Greedily join pieces (each at most ``limit`` long) into chunks."""
    chunks: List[str] = []
    current: Optional[str] = None
    for piece in pieces:
        if current is None:
            current = piece
        elif len(current) + len(separator) + len(piece) <= limit:
            current = current + separator + piece
        else:
            chunks.append(current)
            current = piece
    if current is not None:
        chunks.append(current)
    return chunks


def _hard_wrap(sentence: str, limit: int) -> List[str]:
    """Cut an over-long sentence at the last whitespace before the limit."""
    pieces = []
    rest = sentence
    while len(rest) > limit:
        cut = max(rest.rfind(ws, 1, limit + 1) for ws in _WHITESPACE)
        if cut > 0:
            pieces.append(rest[:cut])
            rest = rest[cut + 1:].lstrip()
        else:
            pieces.append(rest[:limit])
            rest = rest[limit:]
    if rest:
        pieces.append(rest)
    return pieces


def _split_paragraph(paragraph: str, limit: int) -> List[str]:
    pieces: List[str] = []
    for sentence in _SENTENCE_BOUNDARY.split(paragraph):
        if not sentence:
            continue
        if len(sentence) > limit:
            pieces.extend(_hard_wrap(sentence, limit))
        else:
            pieces.append(sentence)
    return _accumulate(pieces, SENTENCE_SEPARATOR, limit)


def split_text(text: str, limit: int) -> List[str]:
    """Split ``text`` into pieces no longer than ``limit`` (no markers)."""
    chunks: List[str] = []
    pending: List[str] = []
    for paragraph in text.split(PARAGRAPH_SEPARATOR):
        if len(paragraph) > limit:
            chunks.extend(_accumulate(pending, PARAGRAPH_SEPARATOR, limit))
            pending = []
            chunks.extend(_split_paragraph(paragraph, limit))
        else:
            pending.append(paragraph)
    chunks.extend(_accumulate(pending, PARAGRAPH_SEPARATOR, limit))
    return [c for c in chunks if c.strip()]


def paginate(
    text: str,
    limit: int = MAX_MESSAGE_LENGTH,
    margin: int = PART_MARKER_MARGIN,
) -> List[ResponseChunk]:
    """Split a response into ordered, labelled chunks."""
    if len(text) <= limit:
        return [ResponseChunk(content=text, index=1, total=1)]

    room = limit - margin
    if room <= 0:
        raise ValueError(f"Margin {margin} leaves no room in a {limit}-character message")

    parts = split_text(text, room)
    total = len(parts)
    if total == 1:
        return [ResponseChunk(content=parts[0], index=1, total=1)]
    return [
        ResponseChunk(content=part, index=i, total=total, marker=PART_MARKER.format(index=i, total=total))
        for i, part in enumerate(parts, start=1)
    ]
