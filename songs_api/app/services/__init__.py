"""
Service layer.

Each service encapsulates the business rules of one domain and works
against the repositories of the database handle it is given, so API
handlers never touch storage directly.
"""
