"""pytest wiring for the test_zappy.py harness functions."""

import pytest

from test_zappy import TestResult


@pytest.fixture
def r(request):
    """Per-test result record, as passed by test_zappy.run_test."""
    return TestResult(request.node.name)
