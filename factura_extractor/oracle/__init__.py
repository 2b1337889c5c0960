"""
Oracle Integration Module.

This module connects an optional external extractor (the oracle) to the
heuristic engine:
    - query_oracle: calls the oracle under a timeout and absorbs its failures
    - query_oracles: tries a chain of oracles, first answer wins
    - OracleMerger / merge_oracle_result: per-field merge over the
      heuristic result
"""

from .base import query_oracle, query_oracles, ORACLE_FIELDS
from .merger import OracleMerger, merge_oracle_result

__all__ = [
    'query_oracle',
    'query_oracles',
    'ORACLE_FIELDS',
    'OracleMerger',
    'merge_oracle_result',
]
