"""Word-preserving line wrapping for text written back into a transcript."""


def _wrap_line(line: str, max_width: int) -> list[str]:
    wrapped: list[str] = []
    while len(line) > max_width:
        # Spaces inside leading indentation are not break points.
        indent = max(len(line) - len(line.lstrip(" ")), 1)
        cut = line.rfind(" ", indent, max_width + 1)
        if cut == -1:
            cut = line.find(" ", max(indent, max_width + 1))
        if cut == -1:
            break
        wrapped.append(line[:cut])
        line = line[cut + 1 :]
    wrapped.append(line)
    return wrapped


def wrap_text(text: str, max_width: int) -> list[str]:
    """Wrap ``text`` to ``max_width`` columns without splitting words.

    Text is split on newlines first, then each long line is broken at the
    nearest space at or before the width. When there is none, the first space
    after the width is used, and a line with no space left is kept whole.

    Args:
        text: Text that may contain newlines
        max_width: Target line width, must be positive

    Returns:
        Lines within the width, or single words longer than it
    """
    if max_width < 1:
        raise ValueError(f"max_width must be positive, got {max_width}")
    lines: list[str] = []
    for line in text.split("\n"):
        lines.extend(_wrap_line(line, max_width))
    return lines
