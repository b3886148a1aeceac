"""Report models produced by covtree."""
