"""Untyped lambda calculus interpreter."""

__version__ = "1.0.0"
