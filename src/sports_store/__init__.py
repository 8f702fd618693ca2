"""Sports Store - persistence layer for training plans, tracks and trainings.

Stores a graph of related domain records in a schemaless document store and
keeps multi-record writes all-or-nothing through compensating rollback.
"""

__version__ = "0.1.0"
