"""Terminal syntax highlighting for generated Swift."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import SwiftLexer


def highlight_swift(text: str) -> str:
    """Colorize Swift source with ANSI escapes."""
    return highlight(text, SwiftLexer(), TerminalFormatter())
