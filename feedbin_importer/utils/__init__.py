"""
Utility modules for the Feedbin Importer.

This package contains error handling, logging, progress tracking,
reporting and argument validation helpers.
"""
