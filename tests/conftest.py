"""Generic fixtures."""

import logging

import pytest

from .testtools import RecordingHandler


def pytest_configure():
    "Runs once before all"
    from acdump.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    "A logger keeping its messages in `test_logger.handlers[0].messages`"
    logger = logging.getLogger("acdump.tests")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.handlers = [RecordingHandler()]
    return logger


@pytest.fixture
def sample_tree(tmp_path):
    "A directory holding two files and a sub directory"
    (tmp_path / "alpha.txt").write_text("a")
    (tmp_path / "beta.txt").write_text("b")
    (tmp_path / "subdir").mkdir()
    return tmp_path
