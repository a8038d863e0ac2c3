"""
Feedbin Importer - import Pocket bookmark exports into Feedbin.
"""

__version__ = "1.0.0"
