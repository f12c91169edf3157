import logging

from mlp_viz.logging_config import setup_logging


def test_setup_logging_does_not_stack_handlers(tmp_path):
    log_file = tmp_path / "viz.log"
    setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG, str(log_file))
    logger = logging.getLogger("mlp_viz")
    try:
        assert len(logger.handlers) == 2
        logging.getLogger("mlp_viz.architecture").debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
