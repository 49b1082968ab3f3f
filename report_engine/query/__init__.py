"""
SQL text building blocks shared by every report compiler.

- Dialects: per-engine rendering primitives (quoting, formatting, JSON access)
- Fragments: the per-compile accumulator of SELECT/JOIN/WHERE/GROUP BY/CTE parts
- Dates: date-option predicates
"""

from .dialects import AthenaDialect, SnowflakeDialect, SqlDialect, get_dialect
from .fragments import CompileStats, QueryFragmentSet

__all__ = [
    "AthenaDialect",
    "SnowflakeDialect",
    "SqlDialect",
    "get_dialect",
    "CompileStats",
    "QueryFragmentSet",
]
