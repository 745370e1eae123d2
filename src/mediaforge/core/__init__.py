"""Core utilities for mediaforge: codec tables, quoting, subprocesses."""
