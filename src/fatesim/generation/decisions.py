"""Parsing of the month-end strategy questions.

The generator returns free text in a fixed convention: numbered questions
("1. ...") each followed by two lettered options ("A) ...", "B) ...").
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

QUESTION_PATTERN = re.compile(r"^(\d+)\.\s*(.*)$")
OPTION_PATTERN = re.compile(r"^([AB])\)\s*(.*)$")


@dataclass
class DecisionQuestion:
    """One strategy question with its two options.

    Attributes:
        number: Question number as written in the text
        text: Question prompt
        options: Option letter -> option text
    """

    number: int
    text: str
    options: dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        """True when both options A and B are present."""
        return "A" in self.options and "B" in self.options


def parse_decision_questions(text: str) -> list[DecisionQuestion]:
    """Parse numbered questions and their A)/B) options.

    Lines that match neither pattern are ignored, as are options that appear
    before the first question. Markdown emphasis around lines is stripped.
    """
    questions: list[DecisionQuestion] = []
    for raw_line in text.splitlines():
        line = raw_line.strip().strip("*").strip()
        if not line:
            continue
        question_match = QUESTION_PATTERN.match(line)
        if question_match:
            questions.append(
                DecisionQuestion(number=int(question_match.group(1)), text=question_match.group(2).strip())
            )
            continue
        option_match = OPTION_PATTERN.match(line)
        if option_match and questions:
            questions[-1].options[option_match.group(1)] = option_match.group(2).strip()
    return questions


def has_complete_questions(text: str | None) -> bool:
    """True if text contains at least one question with both options."""
    if not text:
        return False
    return any(question.is_complete for question in parse_decision_questions(text))
