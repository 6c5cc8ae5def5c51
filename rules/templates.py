"""
Template Rendering - Placeholder substitution for responses
===========================================================

Response templates refer to the capture groups of the pattern that
matched with positional placeholders: ``$1``, ``$2``, ...
"""

import re
from typing import Optional, Sequence


PLACEHOLDER = re.compile(r"\$(\d+)")


def render(template: str, groups: Sequence[Optional[str]]) -> str:
    """
    Substitute ``$k`` placeholders with capture group ``k``.

    Captured text is stripped of surrounding whitespace. Groups that did
    not take part in the match, ``$0`` and indexes beyond the number of
    groups all become the empty string.

    Args:
        template: Response template
        groups: Captures for groups 1..N

    Returns:
        Rendered string

    Example:
        >>> render("How long have you been feeling $1?", ("tired",))
        'How long have you been feeling tired?'
    """
    def replace(match):
        index = int(match.group(1))
        if index < 1 or index > len(groups):
            return ""
        value = groups[index - 1]
        return value.strip() if value else ""

    return PLACEHOLDER.sub(replace, template)


def placeholders(template: str) -> Sequence[int]:
    """List the group indexes a template refers to, in order of appearance."""
    return [int(m.group(1)) for m in PLACEHOLDER.finditer(template)]
