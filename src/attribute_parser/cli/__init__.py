"""Command-line interface module for the attribute parser.

This module provides the ``attribute-parser`` tool for answering attribute
queries, validating markup and dumping parsed trees.
"""

from .main import main

__all__ = ["main"]
