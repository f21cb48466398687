"""Placeholder delimiter grammars."""

from docfill.strategies.placeholders.scanner import (
    GRAMMARS,
    DelimiterGrammar,
    scan,
    scan_double_brace,
    substitute,
)

__all__ = [
    "GRAMMARS",
    "DelimiterGrammar",
    "scan",
    "scan_double_brace",
    "substitute",
]
