"""Emulated link queues, an incremental HTTP/1.1 parser, replay matching and shell option parsing."""

__version__ = "0.1.0"