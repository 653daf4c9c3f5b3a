"""
Tests for the shared logger setup
"""

import logging
import unittest

from exam_scan.utils.logger import app_logger, setup_logger


class TestLogger(unittest.TestCase):

    def test_handlers_and_levels(self):
        levels = sorted(h.level for h in app_logger.handlers)
        self.assertEqual(levels, [logging.DEBUG, logging.INFO])
        self.assertTrue(any(isinstance(h, logging.FileHandler) for h in app_logger.handlers))

    def test_timestamps_carry_the_date(self):
        record = logging.LogRecord('EXAM_SCAN', logging.INFO, __file__, 1, 'ready', None, None)
        record.created = 1700000000.0
        for handler in app_logger.handlers:
            line = handler.formatter.format(record)
            self.assertRegex(line, r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} - \[INFO\] - ready$')

    def test_setup_twice_adds_no_handlers(self):
        count = len(app_logger.handlers)
        again = setup_logger()
        self.assertIs(again, app_logger)
        self.assertEqual(len(app_logger.handlers), count)


if __name__ == '__main__':
    unittest.main()
