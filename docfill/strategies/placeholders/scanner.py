"""Delimiter scanner shared by every extractor and the spreadsheet rewriter.

Four delimiter grammars are recognized:

    {{name}}   double brace, always accepted
    {name}     single brace, rejected if the name contains '=' or '('
    <<name>>   double angle bracket, always accepted
    $name$     double dollar, rejected if the name contains '='

Names are trimmed; empty names are dropped.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DelimiterGrammar:
    """One placeholder delimiter convention.

    Attributes:
        name: Short identifier used in log messages.
        pattern: Compiled regex whose first group is the raw name.
        forbidden: Characters that disqualify a name under this grammar.
    """

    name: str
    pattern: re.Pattern[str]
    forbidden: str = ""

    def accepts(self, raw_name: str) -> str | None:
        """Return the trimmed name if this grammar accepts it, else None."""
        name = raw_name.strip()
        if not name:
            return None
        if any(ch in name for ch in self.forbidden):
            return None
        return name


DOUBLE_BRACE = DelimiterGrammar("double_brace", re.compile(r"\{\{([^}]+)\}\}"))
SINGLE_BRACE = DelimiterGrammar("single_brace", re.compile(r"\{([^{}]+)\}"), forbidden="=(")
DOUBLE_ANGLE = DelimiterGrammar("double_angle", re.compile(r"<<([^>]+)>>"))
DOUBLE_DOLLAR = DelimiterGrammar("double_dollar", re.compile(r"\$([^$]+)\$"), forbidden="=")

GRAMMARS: tuple[DelimiterGrammar, ...] = (
    DOUBLE_BRACE,
    SINGLE_BRACE,
    DOUBLE_ANGLE,
    DOUBLE_DOLLAR,
)

# Substitution order: "{{a}}" must be consumed before the single-brace
# grammar sees "{a}" inside it.
_SUBSTITUTION_ORDER = (DOUBLE_BRACE, DOUBLE_ANGLE, SINGLE_BRACE, DOUBLE_DOLLAR)

# Private-use code points marking already substituted spans.
_SLOT_OPEN = "\ue000"
_SLOT_CLOSE = "\ue001"
_SLOT = re.compile(f"{_SLOT_OPEN}(\\d+){_SLOT_CLOSE}")


def scan(text: str, grammars: tuple[DelimiterGrammar, ...] = GRAMMARS) -> set[str]:
    """Find placeholder names in text.

    Each grammar is applied independently, so a name reachable through
    several grammars is reported once.

    Args:
        text: Raw text to scan.
        grammars: Grammars to apply (all four by default).

    Returns:
        The set of placeholder names. Empty for empty or non-text input.
    """
    if not text or not isinstance(text, str):
        return set()

    names: set[str] = set()
    for grammar in grammars:
        for raw in grammar.pattern.findall(text):
            name = grammar.accepts(raw)
            if name is not None:
                names.add(name)
    return names


def scan_double_brace(text: str) -> set[str]:
    """Find only ``{{name}}`` placeholders."""
    return scan(text, (DOUBLE_BRACE,))


def substitute(text: str, resolver: Callable[[str], str | None]) -> tuple[str, bool]:
    """Replace known placeholders under every grammar.

    Repeated and mixed placeholders in the same text are all replaced.
    Each replacement is parked in a numbered slot until every grammar has
    run, so inserted values are never rescanned.

    Args:
        text: Text containing placeholders.
        resolver: Returns the replacement for a name, or None if the name
            is unknown (the placeholder is then kept verbatim).

    Returns:
        The rewritten text and whether at least one placeholder was replaced.
    """
    if not text:
        return text, False

    slots: list[str] = []

    def _park(grammar: DelimiterGrammar):
        def _replace(match: re.Match[str]) -> str:
            name = grammar.accepts(match.group(1))
            if name is None:
                return match.group(0)
            replacement = resolver(name)
            if replacement is None:
                return match.group(0)
            slots.append(replacement)
            return f"{_SLOT_OPEN}{len(slots) - 1}{_SLOT_CLOSE}"

        return _replace

    for grammar in _SUBSTITUTION_ORDER:
        text = grammar.pattern.sub(_park(grammar), text)

    if not slots:
        return text, False

    logger.debug(f"Substituted {len(slots)} placeholder occurrence(s)")
    return _SLOT.sub(lambda m: slots[int(m.group(1))], text), True
