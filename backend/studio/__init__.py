"""
Studio - creation job orchestrator for short-video generation.
"""

__version__ = "1.0.0"
