# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
"""
pytest configuration file.
"""
import logging

import pytest


@pytest.fixture(autouse=True)
def autodiff_debug_logging(caplog):
    """ Sets the gradpass loggers to DEBUG level and captures their records. """
    caplog.set_level(logging.DEBUG, logger='gradpass')
    yield
