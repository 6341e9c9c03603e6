"""ロギング設定と進捗ログのテスト。"""

import io
import logging
from pathlib import Path
from tempfile import TemporaryDirectory

from harness_analyzer.utils.logger import ProgressLogger, setup_logging


class TestSetupLogging:
    """setup_logging() のテスト。"""

    def teardown_method(self):
        root_logger = logging.getLogger()
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers.clear()

    def test_console_stream_and_level(self):
        stream = io.StringIO()
        root_logger = setup_logging(level="warning", stream=stream)

        logging.getLogger("harness_analyzer.sample").info("hidden")
        logging.getLogger("harness_analyzer.sample").warning("shown")

        assert root_logger.level == logging.WARNING
        assert "shown" in stream.getvalue()
        assert "hidden" not in stream.getvalue()

    def test_unknown_level_defaults_to_info(self):
        root_logger = setup_logging(level="verbose", stream=io.StringIO())
        assert root_logger.level == logging.INFO

    def test_log_file_directory_is_created(self):
        with TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "logs" / "analyzer.log"
            root_logger = setup_logging(log_file=str(log_file), stream=io.StringIO())

            logging.getLogger("harness_analyzer.sample").info("written")
            for handler in root_logger.handlers:
                handler.flush()

            assert "written" in log_file.read_text(encoding="utf-8")
            self.teardown_method()


class TestProgressLogger:
    """ProgressLogger のテスト。"""

    def test_interval_and_last_file(self, caplog):
        logger = logging.getLogger("harness_analyzer.progress_test")
        progress = ProgressLogger(3, logger, log_interval=2)

        with caplog.at_level(logging.INFO, logger=logger.name):
            for name in ("a.cpp", "b.cpp", "c.cpp"):
                progress.update(name)

        messages = [record.getMessage() for record in caplog.records]
        assert messages == [
            "Progress: 2/3 (66.7%) - b.cpp",
            "Progress: 3/3 (100.0%) - c.cpp",
        ]

    def test_complete_reports_failures(self, caplog):
        logger = logging.getLogger("harness_analyzer.progress_test")
        progress = ProgressLogger(2, logger)

        with caplog.at_level(logging.INFO, logger=logger.name):
            progress.update("broken.cpp", failed=True)
            progress.update("good.cpp")
            progress.complete()

        assert caplog.records[-1].getMessage() == "Analyzed 1/2 files (1 failed)"
