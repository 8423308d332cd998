"""multi: run one command template concurrently, locally or over SSH."""

__version__ = "1.0.0"
