"""Cleanup package exports."""
from auto_blogger.cleanup.manager import BlogCleanupManager

__all__ = ['BlogCleanupManager']
