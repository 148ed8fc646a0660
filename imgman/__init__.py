"""Save pasted and dropped images to disk and embed them in Markdown notes."""

__version__ = "0.1.0"
