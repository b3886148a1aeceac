"""Readers for Go coverage output."""

from covtree.adapters.coverage.base import (
    FileStatements,
    Function,
    FunctionProfile,
    PackageFunctions,
    PackageStatements,
    ProfileParseError,
    ProfileReader,
)
from covtree.adapters.coverage.go_cover_adapter import GoCoverProfileReader
from covtree.adapters.coverage.go_func_adapter import GoFuncReader

__all__ = [
    "FileStatements",
    "Function",
    "FunctionProfile",
    "GoCoverProfileReader",
    "GoFuncReader",
    "PackageFunctions",
    "PackageStatements",
    "ProfileParseError",
    "ProfileReader",
]
