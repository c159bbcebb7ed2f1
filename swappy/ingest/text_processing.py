"""
Text cleaning and chunking for seeded markdown docs.

Chunks keep whole lines where they fit, with a small tail overlap, so headings and the
first lines of a section stay together (the normalizer summarizes a chunk from
its first three lines).
"""

import re
import unicodedata


def clean_text(text: str) -> str:
    """NFKC-normalize, strip each line, drop consecutive duplicate lines, keep single blank lines."""
    if not text or not text.strip():
        return ""
    text = unicodedata.normalize("NFKC", text)
    result: list[str] = []
    previous = None
    for line in (raw.strip() for raw in text.splitlines()):
        if line == previous:
            continue
        previous = line
        if line == "" and (not result or result[-1] == ""):
            continue
        result.append(line)
    return "\n".join(result).strip()


def _tail(parts: list[str], overlap: int) -> list[str]:
    """Trailing parts whose joined length fits within overlap."""
    kept: list[str] = []
    size = 0
    for part in reversed(parts):
        if size + len(part) + 1 > overlap:
            break
        kept.append(part)
        size += len(part) + 1
    kept.reverse()
    return kept


def _joined_len(parts: list[str]) -> int:
    return sum(len(p) for p in parts) + max(0, len(parts) - 1)


def _split_long(line: str, chunk_size: int) -> list[str]:
    """A line longer than chunk_size as sentences, then words for oversized sentences."""
    pieces: list[str] = []
    for sent in re.split(r"(?<=[.!?])\s+", line):
        sent = sent.strip()
        if not sent:
            continue
        if len(sent) > chunk_size:
            pieces.extend(sent.split())
        else:
            pieces.append(sent)
    return pieces


def chunk_text(text: str, chunk_size: int = 500, overlap: int = 50) -> list[str]:
    """
    Split text into chunks of at most ~chunk_size chars.

    Lines are kept whole where they fit; long lines are cut on sentence, then
    word boundaries. Chunks are newline-joined and overlap by whole units.
    """
    if not text or not text.strip():
        return []
    text = text.strip()
    if len(text) <= chunk_size:
        return [text]

    units: list[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        units.extend([line] if len(line) <= chunk_size else _split_long(line, chunk_size))

    chunks: list[str] = []
    current: list[str] = []
    for unit in units:
        if current and _joined_len(current) + len(unit) + 1 > chunk_size:
            chunks.append("\n".join(current))
            current = _tail(current, overlap)
        current.append(unit)
    if current:
        chunks.append("\n".join(current))
    return chunks
