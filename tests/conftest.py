import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """CLI invocations reconfigure the root logger; undo it between tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
