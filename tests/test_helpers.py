"""
Tests for the shared OMR rules
"""

import unittest

from exam_scan.utils import OMRUtils


class TestSelectMark(unittest.TestCase):

    def test_single_clear_mark(self):
        self.assertEqual(OMRUtils.select_mark([0.02, 0.9, 0.05, 0.0], 0.4, 0.15), 1)

    def test_nothing_filled(self):
        self.assertIsNone(OMRUtils.select_mark([0.1, 0.2, 0.05, 0.0], 0.4, 0.15))

    def test_two_close_marks_are_ambiguous(self):
        self.assertIsNone(OMRUtils.select_mark([0.85, 0.9, 0.0, 0.0], 0.4, 0.15))

    def test_darker_mark_wins_with_margin(self):
        self.assertEqual(OMRUtils.select_mark([0.5, 0.95, 0.0, 0.0], 0.4, 0.15), 1)

    def test_single_bubble(self):
        self.assertEqual(OMRUtils.select_mark([0.6], 0.4, 0.15), 0)

    def test_empty(self):
        self.assertIsNone(OMRUtils.select_mark([], 0.4, 0.15))


class TestLetters(unittest.TestCase):

    def test_letter_mapping(self):
        self.assertEqual(OMRUtils.index_to_letter(0), 'A')
        self.assertEqual(OMRUtils.index_to_letter(3), 'D')
        self.assertEqual(OMRUtils.letter_to_index('C'), 2)

    def test_option_letters(self):
        self.assertEqual(OMRUtils.option_letters(4), ('A', 'B', 'C', 'D'))
        with self.assertRaises(ValueError):
            OMRUtils.option_letters(0)

    def test_invalid_letter(self):
        with self.assertRaises(ValueError):
            OMRUtils.letter_to_index('a')
        with self.assertRaises(ValueError):
            OMRUtils.index_to_letter(-1)


if __name__ == '__main__':
    unittest.main()
