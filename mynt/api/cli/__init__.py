"""
Mynt CLI

Command-line interface for Mynt.

Commands:
- mynt info: Show header information
- mynt dump: Print decoded contents
- mynt validate: Check that a file decodes
- mynt repack: Re-serialize with or without compression
"""

from mynt.api.cli.main import app

__all__ = ["app"]
