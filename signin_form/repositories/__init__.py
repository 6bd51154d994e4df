"""
Persistence adapters.

Services depend on these repositories instead of touching the Mongo client.
"""
