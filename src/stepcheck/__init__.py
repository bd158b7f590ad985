"""stepcheck: plain-text Given/When/Then scenario runner."""

__version__ = "0.1.0"
