"""Inbound adapters for mini-s3.

Provides the command-line adapter over the storage port.
"""

from mini_s3.adapters.inbound.cli import create_parser, main

__all__ = ["create_parser", "main"]
