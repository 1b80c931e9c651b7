"""Pipeline package exports."""
from auto_blogger.pipeline.runner import BlogRunner, NoArticlesError

__all__ = ['BlogRunner', 'NoArticlesError']
