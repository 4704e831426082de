"""
Utility functions module.

Date arithmetic shared by the signal engine and the indicators. Reference
dates are always passed in by the caller; no helper consults the wall clock.
"""
