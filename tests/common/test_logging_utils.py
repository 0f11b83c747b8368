from __future__ import annotations

import logging

from worktime_engine.common.logging_utils import LOG_FORMAT, setup_logger


def test_setup_logger_installs_handlers_once(tmp_path):
    log_file = tmp_path / "logs" / "engine.log"

    logger = setup_logger("worktime_engine.test_once", "DEBUG", str(log_file), console=False)
    again = setup_logger("worktime_engine.test_once", logging.INFO, str(log_file), console=False)

    assert again is logger
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT

    logger.warning("written")
    logger.handlers[0].flush()
    assert "written" in log_file.read_text(encoding="utf-8")

    logger.handlers[0].close()
    logger.removeHandler(logger.handlers[0])
