"""Test suite package marker."""

import pytest

# Helper modules imported by tests get assertion rewriting too.
pytest.register_assert_rewrite("tests.assertions", "tests.storage_test_utils")
