"""contentctl: file-backed content store for articles, courses, and projects."""

__version__ = "0.3.0"
