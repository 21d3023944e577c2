"""
Application package.

Contains the application factory and its submodules: ``core``
(configuration, logging, security, errors, database handle),
``schemas``, ``repositories``, ``services``, ``utils`` and the HTTP
routes under ``api``.
"""

from .main import create_app  # noqa: F401
