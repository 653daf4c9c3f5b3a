"""
Tests for scoring against a row-specific answer key
"""

import unittest

from exam_scan.core import (AnswerKeyEntry, AnswerKeyReport, AnswerOption, BubbleReading,
                            ExamRow, GradeManager, Question)


def make_question(qid, correct, n_options=4, points=1.0, order=None):
    options = [AnswerOption(f"{qid}-opt{i}", is_correct=(i == correct)) for i in range(n_options)]
    return Question(qid, options, order=order, points=points)


def make_row(questions, orders):
    options = {q.question_id: [q.options[i] for i in orders[q.question_id]] for q in questions}
    entries = []
    for pos, q in enumerate(questions, start=1):
        idx = next((i for i, o in enumerate(options[q.question_id]) if o.is_correct), None)
        if idx is not None:
            entries.append(AnswerKeyEntry(q.question_id, chr(65 + idx), pos))
    return ExamRow('B', 'seed', orders, options, AnswerKeyReport(entries))


class TestGradeManager(unittest.TestCase):
    """Scoring rules"""

    def setUp(self):
        self.questions = [
            make_question('q1', correct=0, points=2.0),
            make_question('q2', correct=1),
            make_question('q3', correct=2),
            make_question('q4', correct=3, points=3.0),
        ]
        # Row order moves every correct option somewhere else
        self.orders = {
            'q1': [1, 2, 0, 3],   # correct (orig 0) printed at C
            'q2': [1, 0, 2, 3],   # correct (orig 1) printed at A
            'q3': [0, 1, 2, 3],   # unchanged, C
            'q4': [3, 2, 1, 0],   # correct (orig 3) printed at A
        }
        self.row = make_row(self.questions, self.orders)
        self.manager = GradeManager(self.questions, self.row)

    def test_row_correct_index(self):
        self.assertEqual(self.row.correct_index('q1'), 2)
        self.assertEqual(self.row.correct_index('q4'), 0)
        self.assertEqual(self.row.answer_key.as_string(), 'CACA')

    def test_scores_with_row_key(self):
        readings = [
            BubbleReading('q1', (0.0, 0.0, 1.0, 0.0), 2),   # right
            BubbleReading('q2', (1.0, 0.0, 0.0, 0.0), 0),   # right
            BubbleReading('q3', (0.0, 1.0, 0.0, 0.0), 1),   # wrong
            BubbleReading('q4', (0.0, 0.0, 0.0, 0.0), None),  # blank
        ]
        result = self.manager.grade(readings)

        self.assertEqual(result.score, 3.0)
        self.assertEqual(result.total_possible, 7.0)
        self.assertEqual([a.is_correct for a in result.answers], [True, True, False, False])
        self.assertEqual(result.unanswered_ids, ['q4'])
        self.assertEqual(result.answered_count, 3)
        self.assertAlmostEqual(result.read_ratio, 0.75)
        self.assertAlmostEqual(result.percentage, 100.0 * 3 / 7)

    def test_unanswered_differs_from_wrong(self):
        result = self.manager.grade_indices({'q3': 0, 'q4': None})
        by_id = {a.question_id: a for a in result.answers}
        self.assertTrue(by_id['q3'].is_answered)
        self.assertFalse(by_id['q3'].is_correct)
        self.assertFalse(by_id['q4'].is_answered)
        self.assertEqual(by_id['q4'].selected_letter, None)
        self.assertEqual(by_id['q3'].selected_letter, 'A')
        # q1 / q2 had no reading at all
        self.assertFalse(by_id['q1'].is_answered)

    def test_canonical_key_is_not_used(self):
        # Marking the originally-correct position A for q1 is wrong in this row
        result = self.manager.grade_indices({'q1': 0})
        self.assertEqual(result.score, 0.0)

    def test_question_without_correct_option(self):
        questions = self.questions + [Question('q5', [AnswerOption('x'), AnswerOption('y')])]
        orders = dict(self.orders, q5=[1, 0])
        row = make_row(questions, orders)
        result = GradeManager(questions, row).grade_indices({'q5': 0})
        self.assertEqual(result.score, 0.0)
        self.assertEqual(result.total_possible, 8.0)

    def test_answers_follow_row_question_order(self):
        self.row.question_order = ['q3', 'q1', 'q4', 'q2']
        manager = GradeManager(self.questions, self.row)
        result = manager.grade_indices({'q1': 2, 'q3': 2})
        self.assertEqual([a.question_id for a in result.answers], ['q3', 'q1', 'q4', 'q2'])
        self.assertEqual(result.score, 3.0)
        self.assertEqual(result.unanswered_ids, ['q4', 'q2'])

    def test_to_frame(self):
        result = self.manager.grade_indices({'q1': 2, 'q2': 3})
        frame = result.to_frame()
        self.assertEqual(list(frame.columns), ['Question', 'Selected', 'Correct', 'Points'])
        self.assertEqual(len(frame), 4)
        self.assertEqual(frame.iloc[0]['Selected'], 'C')
        self.assertEqual(frame.iloc[0]['Points'], 2.0)
        self.assertEqual(frame.iloc[2]['Selected'], '')


class TestQuestionModel(unittest.TestCase):

    def test_correct_index(self):
        self.assertEqual(make_question('q', 2).correct_index, 2)
        self.assertIsNone(Question('q', [AnswerOption('a')]).correct_index)

    def test_requires_options(self):
        with self.assertRaises(ValueError):
            Question('q', [])

    def test_from_dict(self):
        q = Question.from_dict({'id': 7, 'order': 3, 'points': 2,
                                'options': [{'text': 'a'}, {'text': 'b', 'is_correct': True, 'id': 'x'}]})
        self.assertEqual(q.question_id, '7')
        self.assertEqual(q.order, 3)
        self.assertEqual(q.points, 2.0)
        self.assertEqual(q.correct_index, 1)
        self.assertEqual(q.options[1].option_id, 'x')


if __name__ == '__main__':
    unittest.main()
