"""File-per-record persistence for reviews and tasks."""
