import logging

import pytest

from app.core.config import Env, load_config
from app.core.logging import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    root.handlers.clear()
    root.setLevel(level)


def test_debug_level_in_dev(root_logger):
    setup_logging(load_config(Env.DEV, {}))
    assert root_logger.level == logging.DEBUG


def test_info_level_in_prod(root_logger):
    setup_logging(load_config(Env.PROD, {}))
    assert root_logger.level == logging.INFO


def test_explicit_debug_override(root_logger):
    setup_logging(load_config(Env.DEV, {}), debug=False)
    assert root_logger.level == logging.INFO
