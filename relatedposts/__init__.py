"""Related-post recommendations for a blog corpus."""

__version__ = "0.1.0"
