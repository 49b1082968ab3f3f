"""Legacy filter-JSON report importer."""
