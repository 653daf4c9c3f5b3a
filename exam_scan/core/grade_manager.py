from typing import List, Dict, Any, Optional, Sequence
from exam_scan.utils import app_logger
from exam_scan.core.models import ExamRow, Question, ScoredAnswer, ScanResult
from exam_scan.core.omr_engine import BubbleReading

class GradeManager:
    """
    Grading logic for one exam row:
    1. Compare the bubble read for each question with the row's answer key.
    2. Add up the point value of correct answers (raw score).
    3. Report total possible points; grade conversion is the caller's job.
    """

    DEFAULT_MIN_READ_RATIO = 0.9

    def __init__(self, questions: Sequence[Question], row: ExamRow, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            questions: Questions of the evaluation (point values).
            row: The exam row printed on the scanned sheet. Its shuffled
                order decides which bubble is correct.
            config: Runtime config (``ALGORITHM_CONFIG.omr_engine.min_read_ratio``).
        """
        self.row = row
        self.questions = self._in_row_order(questions)
        omr_cfg = (config or {}).get('ALGORITHM_CONFIG', {}).get('omr_engine', {})
        self.min_read_ratio = float(omr_cfg.get('min_read_ratio', self.DEFAULT_MIN_READ_RATIO))

        app_logger.debug(f"GradeManager initialized for row {row.row_label} ({len(self.questions)} questions)")

    def _in_row_order(self, questions: Sequence[Question]) -> List[Question]:
        """Questions as printed on the row; ids the row does not list go last."""
        if not self.row.question_order:
            return list(questions)
        rank = {qid: i for i, qid in enumerate(self.row.question_order)}
        return sorted(questions, key=lambda q: rank.get(q.question_id, len(rank)))

    def grade_question(self, question: Question, selected_index: Optional[int],
                       densities: tuple = ()) -> ScoredAnswer:
        correct_index = self.row.correct_index(question.question_id)
        is_correct = (selected_index is not None
                      and correct_index is not None
                      and selected_index == correct_index)
        return ScoredAnswer(
            question_id=question.question_id,
            selected_option_index=selected_index,
            is_correct=is_correct,
            points_awarded=question.points if is_correct else 0.0,
            densities=tuple(densities),
        )

    def grade(self, readings: List[BubbleReading]) -> ScanResult:
        """
        Score the readings of one sheet.

        Questions without a reading are treated as unanswered.
        """
        by_id = {r.question_id: r for r in readings}

        answers = []
        for question in self.questions:
            reading = by_id.get(question.question_id)
            if reading is None:
                answers.append(self.grade_question(question, None))
            else:
                answers.append(self.grade_question(question, reading.selected_index, reading.densities))

        score = sum(a.points_awarded for a in answers)
        total = sum(q.points for q in self.questions)
        result = ScanResult(answers=answers, score=score, total_possible=total)

        if answers and result.read_ratio < self.min_read_ratio:
            app_logger.warning(
                f"Only {result.answered_count} of {len(answers)} answers were read "
                f"(unanswered: {', '.join(result.unanswered_ids)}).")

        app_logger.info(f"Grading finished for row {self.row.row_label}. Score: {score}/{total}")
        return result

    def grade_indices(self, selections: Dict[str, Optional[int]]) -> ScanResult:
        """Score manually entered bubble indices (same rules as a scan)."""
        readings = [BubbleReading(question_id=str(qid), densities=(), selected_index=idx)
                    for qid, idx in selections.items()]
        return self.grade(readings)
