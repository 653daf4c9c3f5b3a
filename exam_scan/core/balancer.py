from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence
from exam_scan.utils import app_logger, OMRUtils
from exam_scan.core.models import AnswerKeyEntry, AnswerKeyReport, ExamRow, Question, display_order
from exam_scan.core.seeded_random import seeded_shuffle, simple_hash

# Runs of this many identical letters get broken up
STREAK_LENGTH = 4


@dataclass
class _KeyItem:
    question_id: str
    letter: str
    position: int


def shuffle_alternatives(questions: Sequence[Question], seed: str) -> Dict[str, List[int]]:
    """
    Shuffle the option order of every question independently.

    Each question is seeded with ``"{seed}-{question_id}"``, so the same
    (seed, question id) always yields the same permutation.

    Returns:
        question id -> permutation of original option indices (display order).
    """
    return {
        q.question_id: seeded_shuffle(range(len(q.options)), f"{seed}-{q.question_id}")
        for q in questions
    }


def shuffle_questions(questions: Sequence[Question], seed: str) -> List[Question]:
    """
    Reorder the questions of a row with ``seeded_shuffle`` over their display
    order. Returns copies renumbered ``order = 1..n``; the inputs are untouched.
    """
    shuffled = seeded_shuffle(display_order(questions), seed)
    return [replace(q, order=position) for position, q in enumerate(shuffled, start=1)]


def _correct_slot(question: Question, permutation: List[int]) -> Optional[int]:
    for slot, original_index in enumerate(permutation):
        if question.options[original_index].is_correct:
            return slot
    return None


def _move_correct(question: Question, permutation: List[int], to_slot: int) -> bool:
    """Swap the correct option into ``to_slot``; False when that is not possible."""
    from_slot = _correct_slot(question, permutation)
    if from_slot is None or to_slot >= len(permutation) or from_slot == to_slot:
        return False
    permutation[from_slot], permutation[to_slot] = permutation[to_slot], permutation[from_slot]
    return True


def balance_answer_key(shuffled: Dict[str, List[int]],
                       questions_in_order: Sequence[Question],
                       seed: str,
                       row_label: str,
                       num_options: int = 4) -> AnswerKeyReport:
    """
    Even out the correct-letter distribution of a shuffled row, in place.

    1. Every letter should appear ``n // k`` times, the first ``n % k``
       letters once more. Over-represented letters donate questions to the
       first under-represented letter; the donor search starts at a
       position derived from the seed and scans circularly. The loop stops
       early when no donor or target slot exists (partial balance).
    2. One pass breaks runs of 4 identical letters by re-keying the 4th
       question. New runs elsewhere are not re-checked.

    Questions without a correct option are left out of the key.

    Returns:
        The final answer key in display order.
    """
    letters = OMRUtils.option_letters(num_options)
    ordered = display_order(questions_in_order)
    by_id = {q.question_id: q for q in ordered}

    missing = [q.question_id for q in ordered if q.question_id not in shuffled]
    if missing:
        raise ValueError(f"No shuffled order for questions: {', '.join(missing)}")

    # 1. Answer key of the shuffled row
    answer_key: List[_KeyItem] = []
    skipped: List[str] = []
    for position, q in enumerate(ordered, start=1):
        slot = _correct_slot(q, shuffled[q.question_id])
        if slot is None:
            app_logger.warning(f"Question {q.question_id} has no correct option; left out of the answer key.")
            skipped.append(q.question_id)
            continue
        answer_key.append(_KeyItem(q.question_id, OMRUtils.index_to_letter(slot), position))

    if not answer_key:
        return AnswerKeyReport(entries=[], skipped_question_ids=skipped)

    # 2. Balance the distribution
    n = len(answer_key)
    ideal, remainder = divmod(n, num_options)
    targets = {letter: ideal + (1 if i < remainder else 0) for i, letter in enumerate(letters)}
    counts = {letter: 0 for letter in letters}
    for item in answer_key:
        if item.letter in counts:
            counts[item.letter] += 1

    over_represented = [letter for letter in letters if counts[letter] > targets[letter]]

    for over in over_represented:
        excess = counts[over] - targets[over]

        while excess > 0:
            under_represented = [letter for letter in letters if counts[letter] < targets[letter]]
            if not under_represented:
                break
            under = under_represented[0]

            start = simple_hash(f"{seed}-{row_label}-{over}-{under}-{excess}") % n
            donor = None
            for i in range(n):
                candidate = answer_key[(start + i) % n]
                if candidate.letter == over:
                    donor = candidate
                    break
            if donor is None:
                break

            question = by_id[donor.question_id]
            if not _move_correct(question, shuffled[donor.question_id], OMRUtils.letter_to_index(under)):
                app_logger.debug(f"Row {row_label}: cannot move {donor.question_id} from {over} to {under}; "
                                 f"keeping a partially balanced key.")
                break

            donor.letter = under
            counts[over] -= 1
            counts[under] += 1
            excess -= 1

    # 3. Break long streaks (single pass)
    for i in range(n - STREAK_LENGTH + 1):
        current = answer_key[i].letter
        if all(answer_key[i + k].letter == current for k in range(1, STREAK_LENGTH)):
            item = answer_key[i + STREAK_LENGTH - 1]
            possible = [letter for letter in letters if letter != current]
            if not possible:
                continue
            new_letter = possible[i % len(possible)]

            question = by_id[item.question_id]
            if _move_correct(question, shuffled[item.question_id], OMRUtils.letter_to_index(new_letter)):
                item.letter = new_letter

    entries = [AnswerKeyEntry(item.question_id, item.letter, item.position) for item in answer_key]
    return AnswerKeyReport(entries=entries, skipped_question_ids=skipped)


class ExamVersionBalancer:
    """
    Builds exam rows ("A", "B", ...) of one evaluation from a base seed.
    Seed + row label are the durable key of a printed version.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        bal_cfg = self.config.get('ALGORITHM_CONFIG', {}).get('balancer', {})
        self.num_options = int(bal_cfg.get('num_options', 4))
        self.randomize_questions = bool(bal_cfg.get('shuffle_questions', False))
        app_logger.debug(f"ExamVersionBalancer initialized (num_options={self.num_options}, "
                         f"shuffle_questions={self.randomize_questions}).")

    @staticmethod
    def row_seed(base_seed: str, row_label: str) -> str:
        return f"{base_seed}-{row_label}"

    def generate_row(self, questions: Sequence[Question], base_seed: str, row_label: str,
                     randomize_questions: Optional[bool] = None) -> ExamRow:
        """
        Shuffle every question with the row seed, then balance the key.

        With ``randomize_questions`` (default: ``ALGORITHM_CONFIG.balancer.shuffle_questions``)
        the question order is shuffled first with the same row seed, and the
        key is balanced in that printed order.
        """
        if randomize_questions is None:
            randomize_questions = self.randomize_questions
        try:
            seed = self.row_seed(base_seed, row_label)
            if randomize_questions:
                row_questions = shuffle_questions(questions, seed)
            else:
                row_questions = display_order(questions)

            order = shuffle_alternatives(row_questions, seed)
            report = balance_answer_key(order, row_questions, base_seed, row_label, self.num_options)

            options = {
                q.question_id: [q.options[i] for i in order[q.question_id]]
                for q in row_questions
            }
            question_order = [q.question_id for q in row_questions]
            app_logger.info(f"Generated row {row_label}: key {report.as_string()} "
                            f"({len(report.skipped_question_ids)} skipped)")
            return ExamRow(row_label=row_label, seed=base_seed, order=order, options=options,
                           answer_key=report, question_order=question_order)

        except Exception as e:
            app_logger.error(f"Error generating row {row_label}: {e}")
            raise

    def generate_rows(self, questions: Sequence[Question], base_seed: str,
                      row_labels: Iterable[str] = ("A", "B"),
                      randomize_questions: Optional[bool] = None) -> Dict[str, ExamRow]:
        return {label: self.generate_row(questions, base_seed, label, randomize_questions)
                for label in row_labels}
