"""Split long agent output into chat-sized messages."""

DEFAULT_MAX_LENGTH = 1990


def chunk_text(text: str, max_len: int = DEFAULT_MAX_LENGTH) -> list[str]:
    """
    Split *text* into chunks of at most *max_len* characters.

    Prefers the last newline at or before the limit, then the last space,
    then a hard cut. A newline earlier than half the limit, or a space earlier
    than 30% of it, is not worth breaking on. Leading whitespace of every
    continuation is dropped.
    """
    if max_len <= 0:
        raise ValueError("max_len must be positive")
    if len(text) <= max_len:
        return [text]

    chunks = []
    remaining = text
    while remaining:
        if len(remaining) <= max_len:
            chunks.append(remaining)
            break

        split_at = remaining.rfind("\n", 0, max_len + 1)
        if split_at < max_len * 0.5:
            split_at = remaining.rfind(" ", 0, max_len + 1)
        if split_at < max_len * 0.3:
            split_at = max_len

        chunks.append(remaining[:split_at])
        remaining = remaining[split_at:].lstrip()

    return chunks
