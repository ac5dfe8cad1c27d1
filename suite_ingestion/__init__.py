"""
suite_ingestion -- bulk tabular-data import.

Tokenizes uploaded delimited text, auto-maps its headers onto an entity's
field schema, validates and coerces every row, and hands the final records
to an Insert collaborator in one call.

Architecture:
    suite_ingestion/ is a top-level package above suite_config and
    suite_kernel. Nothing in those packages imports from ingestion.
"""
