"""
vector_core
-----------
Field-mapping vectorization engine: settings, logging, errors, cache
directory resolution, per-record and batch vectorizers, host hook.

Import the host entry points from vector_core.extension.
"""
