"""install-qt — install a versioned Qt SDK onto a CI runner."""

__version__ = "0.1.0"
