"""Readers for Go test output."""

from covtree.adapters.unit.go_test_adapter import GoTestEventReader, TestOutputParseError

__all__ = ["GoTestEventReader", "TestOutputParseError"]
