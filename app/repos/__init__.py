"""
Repository layer for document store access.

Query normalization, offset pagination and the User document operations
live here; the service layer builds its contracts on top of them.
"""
