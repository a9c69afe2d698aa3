# -*- coding: UTF-8 -*-

import pytest

from swdemangle.config import Config


@pytest.fixture
def config():
    """ restore every cfg value changed by a test """
    saved = {k: getattr(Config, k) for k in Config.Keys()}
    yield Config
    for k, v in saved.items():
        setattr(Config, k, v)
