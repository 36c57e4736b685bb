"""goreload - rebuild and restart a Go program whenever its sources change."""

__version__ = "0.1.0"
