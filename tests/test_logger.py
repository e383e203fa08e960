import logging
import os
import tempfile
import unittest
from unittest import mock

from sentiment_index.core.logger import setup_logger


class TestSetupLogger(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def _cleanup(self, logger: logging.Logger) -> None:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_file_and_console_handlers(self) -> None:
        path = os.path.join(self.tmp.name, "logs", "run.log")
        logger = setup_logger("test_logger_handlers", log_file=path)
        self.addCleanup(self._cleanup, logger)
        self.assertEqual(len(logger.handlers), 2)
        self.assertEqual(logger.level, logging.INFO)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        with open(path, encoding="utf-8") as f:
            self.assertIn("| INFO     | test_logger.test_file_and_console_handlers | hello", f.read())

    def test_repeat_setup_keeps_handlers(self) -> None:
        path = os.path.join(self.tmp.name, "run.log")
        logger = setup_logger("test_logger_repeat", log_file=path)
        self.addCleanup(self._cleanup, logger)
        self.assertIs(setup_logger("test_logger_repeat", log_file=path), logger)
        self.assertEqual(len(logger.handlers), 2)

    def test_level_from_environment(self) -> None:
        path = os.path.join(self.tmp.name, "run.log")
        with mock.patch.dict(os.environ, {"SENTIMENT_LOG_LEVEL": "debug"}):
            logger = setup_logger("test_logger_level", log_file=path)
        self.addCleanup(self._cleanup, logger)
        self.assertEqual(logger.level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
