"""Tests for GoFuncReader (adapters/coverage/go_func_adapter.py)."""

from __future__ import annotations

import pytest

from covtree.adapters.coverage.base import ProfileParseError
from covtree.adapters.coverage.go_func_adapter import GoFuncReader

_GO_FUNC_OUTPUT = (
    "example.com/mypkg/foo.go:5:\t\tNewFoo\t\t100.0%\n"
    "example.com/mypkg/foo.go:10:\t\tparse\t\t0.0%\n"
    "example.com/mypkg/bar.go:1:\t\tBar\t\t66.7%\n"
    "example.com/mypkg/sub/baz.go:3:\t\tString\t\t50.0%\n"
    "total:\t\t\t\t(statements)\t\t57.1%\n"
)


class TestGoFuncRead:
    def test_name(self) -> None:
        assert GoFuncReader().name == "go_func"

    def test_groups_by_package_and_file(self) -> None:
        profile = GoFuncReader().read(_GO_FUNC_OUTPUT)
        packages = {p.package: p for p in profile.packages}
        assert set(packages) == {"example.com/mypkg", "example.com/mypkg/sub"}
        foo = packages["example.com/mypkg"].files["example.com/mypkg/foo.go"]
        assert [fn.function for fn in foo] == ["NewFoo", "parse"]

    def test_function_fields(self) -> None:
        profile = GoFuncReader().read(_GO_FUNC_OUTPUT)
        packages = {p.package: p for p in profile.packages}
        (bar,) = packages["example.com/mypkg"].files["example.com/mypkg/bar.go"]
        assert bar.function == "Bar"
        assert bar.file == "example.com/mypkg/bar.go"
        assert bar.line == 1
        assert bar.percent == 66.7

    def test_total_line(self) -> None:
        assert GoFuncReader().read(_GO_FUNC_OUTPUT).total == 57.1

    def test_space_separated_columns(self) -> None:
        profile = GoFuncReader().read("example.com/p/a.go:7:    Run    12.5%\n")
        fn = profile.packages[0].files["example.com/p/a.go"][0]
        assert (fn.function, fn.line, fn.percent) == ("Run", 7, 12.5)

    def test_empty_text(self) -> None:
        profile = GoFuncReader().read("")
        assert profile.packages == []
        assert profile.total is None

    def test_malformed_line_raises(self) -> None:
        with pytest.raises(ProfileParseError, match="line 2"):
            GoFuncReader().read("example.com/p/a.go:7:\tRun\t12.5%\nnot a function line\n")

    def test_root_module_trim(self) -> None:
        profile = GoFuncReader("example.com/mypkg").read(_GO_FUNC_OUTPUT)
        packages = {p.package: p for p in profile.packages}
        assert set(packages["example.com/mypkg"].files) == {"foo.go", "bar.go"}
        (baz,) = packages["example.com/mypkg/sub"].files["sub/baz.go"]
        assert baz.file == "sub/baz.go"
