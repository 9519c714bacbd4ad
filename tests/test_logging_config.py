"""Unit tests for vidtube.core.logging_config."""

import logging
import unittest

from vidtube.core.logging_config import LOG_DATE_FORMAT, LOG_FORMAT, UTCFormatter


class TestUTCFormatter(unittest.TestCase):
    def test_timestamps_are_utc(self) -> None:
        record = logging.LogRecord("vidtube", logging.INFO, __file__, 1, "hello", None, None)
        record.created = 0.0
        formatter = UTCFormatter(LOG_FORMAT, LOG_DATE_FORMAT)
        self.assertEqual(formatter.formatTime(record, LOG_DATE_FORMAT), "1970-01-01T00:00:00Z")
        self.assertTrue(formatter.format(record).startswith("1970-01-01T00:00:00Z INFO vidtube hello"))


if __name__ == "__main__":
    unittest.main()
