"""Report definitions, per-type compilers and the report HTTP surface."""
