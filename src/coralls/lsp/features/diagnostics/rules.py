"""Pattern rules that turn text matches into diagnostics."""

import re
from re import Match, Pattern
from dataclasses import dataclass
from typing import Iterator, Tuple

from lsprotocol import types


@dataclass(frozen=True)
class PatternRule:
    """
    A diagnostic rule driven by a regular expression.

    Every non-overlapping match of ``pattern`` in a document yields one
    diagnostic, in match order.

    Attributes:
        pattern: Compiled expression to scan documents with
        message_template: ``str.format`` template; ``{match}`` is the matched text
        severity: Severity of the produced diagnostics
        source: Source tag shown by the host
        related_messages: Advisory messages attached as related information
            when the host supports it
    """
    pattern: Pattern[str]
    message_template: str
    severity: types.DiagnosticSeverity = types.DiagnosticSeverity.Warning
    source: str = "ex"
    related_messages: Tuple[str, ...] = ()

    def matches(self, text: str) -> Iterator[Match[str]]:
        return self.pattern.finditer(text)

    def message_for(self, matched_text: str) -> str:
        return self.message_template.format(match=matched_text)


# Runs of two or more uppercase ASCII letters standing as a whole word
UPPERCASE_WORD_RULE = PatternRule(
    pattern=re.compile(r"\b[A-Z]{2,}\b", re.ASCII),
    message_template="{match} is all uppercase.",
    related_messages=("Spelling matters", "Particularly for names"),
)
