"""
Pull usable code out of a free-form model answer.

Fenced markdown blocks are collected in order of appearance.  The text
between an opening and the next closing fence is opaque; blocks never
overlap.  The opening fence line is an info string: a language tag,
optionally followed by ``key=value`` attributes or a ``{...}`` group
(```` ```python title="a.py" ````), none of which reach the code.  A tag is
only recognised when the info string fills the whole line, so a one-line
block such as ```` ```x = 1``` ```` keeps ``x`` as code.
"""

import re
from dataclasses import dataclass

FENCE = "```"

_INFO_ATTR = r"""(?:[\w\-]+=(?:"[^"\n]*"|'[^'\n]*'|[^\s`]+)|\{[^}\n]*\})"""

_BLOCK_RE = re.compile(
    r"```(?:([\w#+.\-]+)(?:[ \t]+" + _INFO_ATTR + r")*[ \t]*(?=\r?\n))?\s*(.*?)```",
    re.DOTALL,
)


@dataclass(frozen=True)
class CodeBlock:
    language: str | None
    body: str


def find_code_blocks(text: str) -> list[CodeBlock]:
    """Return every fenced block in *text*, bodies trimmed."""
    return [
        CodeBlock(language=m.group(1) or None, body=m.group(2).strip())
        for m in _BLOCK_RE.finditer(text)
    ]


def extract_code(text: str) -> str:
    """Reduce a model answer to one code string.

    With one or more fenced blocks the trimmed bodies are joined by a blank
    line.  Without any, the whole answer is treated as code and returned
    trimmed (``""`` for empty input).
    """
    blocks = find_code_blocks(text)
    if blocks:
        return "\n\n".join(block.body for block in blocks)
    return text.strip()


def has_unclosed_fence(text: str) -> bool:
    """True when a fence was opened but never closed (likely truncation)."""
    return text.count(FENCE) % 2 == 1
