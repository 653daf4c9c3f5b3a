from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from exam_scan.utils import OMRUtils


@dataclass(frozen=True)
class AnswerOption:
    """One alternative of a question."""
    text: str
    is_correct: bool = False
    option_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnswerOption":
        return cls(
            text=str(data.get("text", "")),
            is_correct=bool(data.get("is_correct", False)),
            option_id=None if data.get("id") is None else str(data["id"]),
        )


@dataclass
class Question:
    """
    A question with its alternatives in creation (display) order.

    - question_id: stable identifier, also part of the shuffle seed
    - options: ordered alternatives, exactly one should be correct
    - order: display position (falls back to list position when None)
    - points: value awarded when answered correctly
    """
    question_id: str
    options: List[AnswerOption]
    order: Optional[int] = None
    points: float = 1.0

    def __post_init__(self) -> None:
        self.question_id = str(self.question_id)
        self.options = list(self.options)
        if not self.options:
            raise ValueError(f"Question {self.question_id} has no options.")
        if self.points < 0:
            raise ValueError(f"Question {self.question_id} has negative points.")

    @property
    def correct_index(self) -> Optional[int]:
        for i, opt in enumerate(self.options):
            if opt.is_correct:
                return i
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        return cls(
            question_id=str(data["id"]),
            options=[AnswerOption.from_dict(o) for o in data.get("options", [])],
            order=data.get("order"),
            points=float(data.get("points", 1.0)),
        )


def display_order(questions: Sequence[Question]) -> List[Question]:
    """Questions sorted by ``order``; ties and missing orders keep list position."""
    indexed = list(enumerate(questions))
    indexed.sort(key=lambda item: (item[1].order if item[1].order is not None else item[0], item[0]))
    return [q for _, q in indexed]


@dataclass(frozen=True)
class AnswerKeyEntry:
    question_id: str
    correct_letter: str
    ordinal_position: int


@dataclass
class AnswerKeyReport:
    """
    Final answer key of one exam row, in display order.
    Questions without a correct option are listed in ``skipped_question_ids``.
    """
    entries: List[AnswerKeyEntry]
    skipped_question_ids: List[str] = field(default_factory=list)

    def letters(self) -> List[str]:
        return [e.correct_letter for e in self.entries]

    def as_string(self) -> str:
        return ''.join(self.letters())

    def letter_counts(self) -> Dict[str, int]:
        return dict(Counter(self.letters()))

    def correct_index_map(self) -> Dict[str, int]:
        return {e.question_id: OMRUtils.letter_to_index(e.correct_letter) for e in self.entries}

    def to_frame(self) -> pd.DataFrame:
        """Printable answer key: one row per question."""
        return pd.DataFrame(
            [{"Position": e.ordinal_position, "Question": e.question_id, "Answer": e.correct_letter}
             for e in self.entries],
            columns=["Position", "Question", "Answer"],
        )


@dataclass
class ExamRow:
    """
    One shuffled version of an evaluation.

    ``order`` maps question id -> permutation of the original option indices,
    ``options`` maps question id -> the alternatives in printed order,
    ``question_order`` lists the question ids in the order printed on this row.
    Callers persist it (or its seed + label) to grade scans of that row later.
    """
    row_label: str
    seed: str
    order: Dict[str, List[int]]
    options: Dict[str, List[AnswerOption]]
    answer_key: AnswerKeyReport
    question_order: List[str] = field(default_factory=list)

    def option_counts(self) -> Dict[str, int]:
        return {qid: len(opts) for qid, opts in self.options.items()}

    def correct_index(self, question_id: str) -> Optional[int]:
        """Bubble index of the correct alternative in this row, None if there is none."""
        for i, opt in enumerate(self.options.get(str(question_id), [])):
            if opt.is_correct:
                return i
        return None


@dataclass(frozen=True)
class ScoredAnswer:
    """
    Grading outcome of one question.
    ``selected_option_index is None`` means unanswered, which is different
    from answered incorrectly.
    """
    question_id: str
    selected_option_index: Optional[int]
    is_correct: bool
    points_awarded: float = 0.0
    densities: tuple = ()

    @property
    def is_answered(self) -> bool:
        return self.selected_option_index is not None

    @property
    def selected_letter(self) -> Optional[str]:
        if self.selected_option_index is None:
            return None
        return OMRUtils.index_to_letter(self.selected_option_index)


@dataclass
class ScanResult:
    """Raw score of one scanned sheet. Grade conversion is left to the caller."""
    answers: List[ScoredAnswer]
    score: float
    total_possible: float

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a.is_answered)

    @property
    def unanswered_ids(self) -> List[str]:
        return [a.question_id for a in self.answers if not a.is_answered]

    @property
    def read_ratio(self) -> float:
        if not self.answers:
            return 0.0
        return self.answered_count / len(self.answers)

    @property
    def percentage(self) -> float:
        if self.total_possible <= 0:
            return 0.0
        return 100.0 * self.score / self.total_possible

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [{"Question": a.question_id,
              "Selected": a.selected_letter or "",
              "Correct": a.is_correct,
              "Points": a.points_awarded}
             for a in self.answers],
            columns=["Question", "Selected", "Correct", "Points"],
        )
