"""
Scene search package.

- canonicalize: Filename normalization for fuzzy matching
- schema: Field types and the scene index schema
- mapper: Scene record to index document projection
- index_store: Embedded tantivy index handle
- locks: Named non-blocking operation locks
"""
