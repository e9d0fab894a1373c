"""
Mynt API Module

User-facing interfaces:
- cli: Command-line interface (mynt command)
"""

__all__ = [
    "cli",
]
