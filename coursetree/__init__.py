"""coursetree: parse, validate and assemble Markdown course content."""

__version__ = "1.0.0"
