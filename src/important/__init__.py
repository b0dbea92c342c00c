"""
important - Core Package

A command-line tool to mark files as important and find them again,
using extended file attributes with a catalog-file fallback.
"""

__version__ = "0.1.0"
__author__ = "important maintainers"
