"""Single-user voice agent CLI (``python -m src.cli``)."""
