"""Command-line interface for wt-core.

This package provides argument parsing (``args``) and the entry point
(``main.main``, installed as the ``wt-core`` script).
"""

from .args import build_parser, parse_args

__all__ = ["build_parser", "parse_args"]
