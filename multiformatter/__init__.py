"""
Multi Formatter

Runs several independent formatters over one document, in order, and
reports a single cumulative edit.
"""

__version__ = "0.2.0"
