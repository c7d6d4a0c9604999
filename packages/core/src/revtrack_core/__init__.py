"""Task lifecycle, review conversion, statistics and reports."""
