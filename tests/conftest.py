import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_treeops_logger():
    yield
    logger = logging.getLogger("treeops")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
