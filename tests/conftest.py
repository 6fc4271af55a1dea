import logging

import pytest


@pytest.fixture(autouse=True)
def reset_report_logger():
    """Undo handlers installed by setup_logging so caplog sees every record."""
    yield
    logger = logging.getLogger("finkreport")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
