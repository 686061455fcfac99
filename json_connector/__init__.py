"""
JSON connector.

Exposes an arbitrary JSON source as a flat table: an inferred schema of
dotted-path fields plus rows projected onto a requested subset of them.
"""

__version__ = "0.1.0"
