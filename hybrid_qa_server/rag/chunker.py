"""Split page text into bounded-size chunks.

Text is first split at heading lines and blank-line paragraph breaks. Blocks
still longer than ``max_chars`` are packed greedily sentence by sentence.
"""

import re

_BLOCK_SPLIT = re.compile(r"\n(?=#{1,6} )|\n{2,}")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


def split_blocks(text: str) -> list[str]:
    """Split text on heading markers and paragraph breaks, dropping empty blocks."""
    return [block.strip() for block in _BLOCK_SPLIT.split(text) if block.strip()]


def pack_sentences(block: str, max_chars: int) -> list[str]:
    """Greedily pack sentences into chunks of at most ``max_chars``.

    A sentence that alone exceeds ``max_chars`` becomes its own chunk.
    """
    chunks: list[str] = []
    current = ""
    for sentence in _SENTENCE_SPLIT.split(block):
        sentence = sentence.strip()
        if not sentence:
            continue
        candidate = f"{current} {sentence}" if current else sentence
        if len(candidate) > max_chars and current:
            chunks.append(current)
            current = sentence
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


def chunk_text(text: str, max_chars: int = 1000) -> list[str]:
    """Split ``text`` into chunks of at most ``max_chars`` where sentence boundaries allow.

    Deterministic: the same input always yields the same chunk boundaries.

    Args:
        text: Heading-annotated page text
        max_chars: Soft upper bound on chunk length

    Returns:
        Non-empty chunks in document order
    """
    if max_chars < 1:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    chunks: list[str] = []
    for block in split_blocks(text):
        if len(block) <= max_chars:
            chunks.append(block)
        else:
            chunks.extend(pack_sentences(block, max_chars))
    return chunks
