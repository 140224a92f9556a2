"""Tests for the collection hook in tests/conftest.py."""


def test_unmarked_tests_run_as_unit(request):
    assert request.node.get_closest_marker("unit") is not None
