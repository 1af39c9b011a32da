"""Source text helpers for the heuristic (non-parser) analyzers."""

from __future__ import annotations

from typing import NamedTuple, Optional

from .languages import LanguageConfig

_PAIRS = {")": "(", "]": "[", "}": "{"}
_OPENERS = set(_PAIRS.values())


def blank_strings_and_comments(content: str, config: LanguageConfig) -> str:
    """Replace string literals and comments with spaces.

    Newlines are kept, so line and column numbers in the result match the
    original text. Quote characters themselves are kept so ``""`` stays
    visible as an (empty) string.
    """
    out: list[str] = []
    i = 0
    n = len(content)
    line_comment = config.line_comment
    block = config.block_comment
    quotes = config.string_quotes

    while i < n:
        ch = content[i]

        if line_comment and content.startswith(line_comment, i):
            end = content.find("\n", i)
            end = n if end == -1 else end
            out.append(" " * (end - i))
            i = end
            continue

        if block and content.startswith(block[0], i):
            end = content.find(block[1], i + len(block[0]))
            end = n if end == -1 else end + len(block[1])
            out.append(_blank(content[i:end]))
            i = end
            continue

        if ch in quotes:
            j = i + 1
            while j < n:
                c = content[j]
                if c == "\\":
                    j += 2
                    continue
                if c == ch:
                    break
                if c == "\n" and ch != "`":
                    break
                j += 1
            end = min(j, n)
            out.append(ch)
            out.append(_blank(content[i + 1 : end]))
            if end < n and content[end] == ch:
                out.append(ch)
                end += 1
            i = end
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def _blank(text: str) -> str:
    return "".join("\n" if c == "\n" else " " for c in text)


class BracketProblem(NamedTuple):
    rule: str
    line: int
    column: int
    message: str


def find_bracket_problem(cleaned: str) -> Optional[BracketProblem]:
    """First unbalanced bracket in text already passed through
    ``blank_strings_and_comments``, or None when brackets balance."""
    stack: list[tuple[str, int, int]] = []
    line, col = 1, 0
    for ch in cleaned:
        if ch == "\n":
            line += 1
            col = 0
            continue
        col += 1
        if ch in _OPENERS:
            stack.append((ch, line, col))
        elif ch in _PAIRS:
            if not stack:
                return BracketProblem(
                    "unexpected_bracket", line, col, f"Unexpected closing bracket '{ch}'"
                )
            opener, o_line, o_col = stack.pop()
            if opener != _PAIRS[ch]:
                return BracketProblem(
                    "mismatched_bracket",
                    line,
                    col,
                    f"Closing '{ch}' does not match '{opener}' opened at line {o_line}",
                )
    if stack:
        opener, o_line, o_col = stack[-1]
        return BracketProblem("unclosed_bracket", o_line, o_col, f"Unclosed bracket '{opener}'")
    return None


def line_at(content: str, line: int) -> str:
    lines = content.splitlines()
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""
