"""Domain layer for Sports Store.

Contains the persistent records and the per-type identity rules.
This layer has no dependencies on storage concerns.
"""
