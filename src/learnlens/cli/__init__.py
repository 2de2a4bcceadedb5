"""Command-line interface (``learnlens``)."""
