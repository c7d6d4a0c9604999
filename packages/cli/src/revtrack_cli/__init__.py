"""revtrack command-line interface."""
