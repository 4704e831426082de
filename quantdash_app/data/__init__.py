"""
Data models and series alignment.

Immutable entities for observations and computed outputs, plus the aligner
that merges independently sourced series onto one calendar.
"""
