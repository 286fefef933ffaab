"""Workforce analytics and benchmarking engine."""

__version__ = "0.1.0"
