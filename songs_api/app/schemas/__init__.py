"""
Pydantic schema definitions for API payloads.

Each domain (songs, users) defines its own request and response
models.  Schemas are separated from storage documents so that the API
representation can differ from what MongoDB holds.
"""
