"""Scheduler package exports."""
from auto_blogger.scheduler.jobs import BlogScheduler

__all__ = ['BlogScheduler']
