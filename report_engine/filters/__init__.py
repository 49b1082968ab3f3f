"""Entity filter calculators."""
