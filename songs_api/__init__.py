"""
Top-level package for the Songs API.

A REST backend for songs and users with token authentication on top
of MongoDB.  All functionality lives in submodules under ``app``.
"""

__all__ = []
