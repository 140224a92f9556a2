"""
bossdesk - pg-boss schema inspection and queue metrics.

Detects which pg-boss schema revision a database carries, speaks the matching
SQL dialect, and aggregates live and historical queue metrics.

- bossdesk.core: Errors, logging, settings, executor boundary
- bossdesk.schema: Version detection, column mappings, adapters, registry
- bossdesk.ops: Query services returning ``OperationResult`` envelopes
- bossdesk.cli: ``bossdesk`` command line
"""

__version__ = "0.1.0"
