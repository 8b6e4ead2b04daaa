"""
Normalization of raw model output into a bare code snippet.

Models tend to wrap code in markdown fences, tag it with a language name,
and open with a sentence of prose. All of that is stripped here.
"""

from typing import List, Optional

from .languages import is_language_tag

NO_CODE_PLACEHOLDER = "// No code generated"

FENCE = "```"
CONVERSATIONAL_OPENERS = ("Here", "This", "The following")

# Each pass only removes text, so this bound is never reached in practice
_MAX_PASSES = 8


def normalize_generated_code(raw_text: Optional[str]) -> str:
    """Convert raw model output into a bare code snippet.

    Applies fence stripping, language tag removal, leading prose removal
    and trailing whitespace trimming until the text stops changing, so
    normalizing already-normalized text returns it unchanged.

    Args:
        raw_text: Text returned by the model

    Returns:
        Cleaned code, or NO_CODE_PLACEHOLDER if nothing usable remains
    """
    if raw_text is None or not raw_text.strip():
        return NO_CODE_PLACEHOLDER

    current = raw_text
    for _ in range(_MAX_PASSES):
        cleaned = _normalize_pass(current)
        if cleaned == current:
            break
        current = cleaned

    if not current.strip():
        return NO_CODE_PLACEHOLDER
    return current


def is_placeholder(code: Optional[str]) -> bool:
    """Check whether normalized code carries no usable content."""
    return code is None or not code.strip() or code.strip() == NO_CODE_PLACEHOLDER


def _normalize_pass(text: str) -> str:
    lines = text.replace("\r\n", "\n").split("\n")
    _drop_blank_edges(lines)

    # (a) opening fence, (b) bare language tag right after it
    if lines and lines[0].strip().startswith(FENCE):
        del lines[0]
        if lines and is_language_tag(lines[0]):
            del lines[0]

    # (a) closing fence
    _drop_blank_edges(lines)
    if lines:
        last = lines[-1].rstrip()
        if last.strip() == FENCE:
            del lines[-1]
        elif last.endswith(FENCE):
            lines[-1] = last[:-len(FENCE)]

    # (c) leading blank lines and conversational prose
    while lines and (not lines[0].strip() or _is_conversational(lines[0])):
        del lines[0]

    # (d)
    return "\n".join(lines).rstrip()


def _drop_blank_edges(lines: List[str]) -> None:
    while lines and not lines[0].strip():
        del lines[0]
    while lines and not lines[-1].strip():
        del lines[-1]


def _is_conversational(line: str) -> bool:
    return line.lstrip().startswith(CONVERSATIONAL_OPENERS)
