"""Measure folder sizes down to a bounded depth and write sortable reports."""

__version__ = "0.1.0"
