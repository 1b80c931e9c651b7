"""Email package exports."""
from auto_blogger.email.sender import send_email, send_subscription_emails, send_test_email, EmailConfigError

__all__ = ['send_email', 'send_subscription_emails', 'send_test_email', 'EmailConfigError']
