"""Custom (extra) field discovery and materialisation checks."""
