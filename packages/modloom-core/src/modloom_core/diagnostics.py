"""Source-framed diagnostics for parse failures."""

from __future__ import annotations

# Context lines shown around the offending line
LINES_ABOVE = 2
LINES_BELOW = 3


def format_error(message: str, path: str, source: str, line: int, column: int) -> str:
    """Render a message with the surrounding source lines.

    The offending line is marked with ``>`` and a caret points at the column,
    followed by the message:

        /app/main.py
          1 | x = 1
        > 2 | y = (
            |     ^ '(' was never closed

    Line and column are 1-based and clamped to the source.

    Args:
        message: Error message placed after the caret.
        path: File identifier printed above the frame.
        source: Full source text.
        line: 1-based line of the error.
        column: 1-based column of the error.

    Returns:
        Multi-line diagnostic, framed by leading and trailing newlines.
    """
    lines = source.splitlines() or [""]
    line = min(max(line, 1), len(lines))
    column = max(column, 1)

    first = max(line - LINES_ABOVE, 1)
    last = min(line + LINES_BELOW, len(lines))
    gutter_width = len(str(last))

    frame: list[str] = []
    for number in range(first, last + 1):
        text = lines[number - 1]
        gutter = str(number).rjust(gutter_width)
        if number == line:
            frame.append(f"> {gutter} | {text}".rstrip())
            padding = "".join(ch if ch == "\t" else " " for ch in text[: column - 1])
            frame.append(f"  {' ' * gutter_width} | {padding}^ {message}")
        else:
            frame.append(f"  {gutter} | {text}".rstrip())

    return "\n" + path + "\n" + "\n".join(frame) + "\n"
