import logging

from reposcout.utils.logging import get_logger


class _Collector(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_package_logger_does_not_propagate_to_root():
    logger = get_logger("reposcout.pipeline.scout")
    assert logging.getLogger("reposcout").propagate is False

    root_collector = _Collector()
    logging.getLogger().addHandler(root_collector)
    try:
        logger.warning("scout warning")
    finally:
        logging.getLogger().removeHandler(root_collector)

    assert root_collector.records == []


def test_package_logger_has_a_single_handler_after_repeat_setup():
    get_logger("reposcout.a")
    get_logger("reposcout.b")
    assert len(logging.getLogger("reposcout").handlers) == 1
