"""Readers that turn Go toolchain output into covtree input structures."""
