"""Web API package exports."""
from auto_blogger.web.app import create_app
from auto_blogger.web.services import Services, build_services

__all__ = ['create_app', 'Services', 'build_services']
