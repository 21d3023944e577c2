"""
API package.

``router`` aggregates the domain routers (songs, users); ``main``
mounts it under ``/api``.
"""
