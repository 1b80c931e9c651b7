import smtplib
import ssl
import time
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr, formatdate
from socket import error as socket_error
from typing import Dict, Any, List, Optional
import certifi
from auto_blogger.config.settings import EMAIL_SETTINGS
from auto_blogger.core.text_utils import strip_html
from auto_blogger.logging_cfg.logger import setup_logger

# Set up logger
logger = setup_logger()

# Constants for retry settings
MAX_RETRIES = 3
RETRY_DELAY = 5
SMTP_TIMEOUT = 30
SMTP_SSL_PORT = 465


class EmailConfigError(Exception):
    """Raised when SMTP settings are incomplete."""
    pass


def create_secure_smtp_context():
    """Create a secure SSL context for SMTP"""
    context = ssl.create_default_context(
        purpose=ssl.Purpose.SERVER_AUTH,
        cafile=certifi.where()
    )
    context.verify_mode = ssl.CERT_REQUIRED
    return context


def validate_smtp_settings(smtp_settings: Dict[str, Any]) -> None:
    missing = [key for key in ('smtp_server', 'smtp_username', 'smtp_password', 'sender_email')
               if not smtp_settings.get(key)]
    if missing:
        raise EmailConfigError(f"Missing email settings: {', '.join(missing)}")


def create_smtp_connection(smtp_settings: Dict[str, Any]):
    """Create and configure SMTP connection with retry logic"""
    retry_count = 0
    while retry_count < MAX_RETRIES:
        try:
            context = create_secure_smtp_context()
            if smtp_settings['smtp_port'] == SMTP_SSL_PORT:
                server = smtplib.SMTP_SSL(
                    smtp_settings['smtp_server'],
                    smtp_settings['smtp_port'],
                    timeout=SMTP_TIMEOUT,
                    context=context
                )
            else:
                server = smtplib.SMTP(
                    smtp_settings['smtp_server'],
                    smtp_settings['smtp_port'],
                    timeout=SMTP_TIMEOUT
                )
                server.starttls(context=context)
            server.login(smtp_settings['smtp_username'], smtp_settings['smtp_password'])
            return server
        except (socket_error, smtplib.SMTPException) as e:
            retry_count += 1
            if retry_count == MAX_RETRIES:
                raise
            logger.warning(f"SMTP connection attempt {retry_count} failed: {str(e)}")
            time.sleep(RETRY_DELAY)


def build_message(subject: str, body: str, recipient: str, smtp_settings: Dict[str, Any]) -> MIMEMultipart:
    msg = MIMEMultipart('alternative')
    msg['Subject'] = subject
    msg['From'] = formataddr((smtp_settings['sender_name'], smtp_settings['sender_email']))
    msg['To'] = recipient
    msg['Date'] = formatdate(localtime=True)

    # Plain text first so clients prefer the HTML part
    msg.attach(MIMEText(strip_html(body), 'plain'))
    msg.attach(MIMEText(body, 'html'))
    return msg


def send_email(subject: str, body: str, recipients: List[str], smtp_settings: Optional[Dict[str, Any]] = None) -> bool:
    """Send an HTML email with a plain-text alternative to each recipient.

    Args:
        subject: Email subject line
        body: HTML content of the email
        recipients: Addresses to send to, one message each
        smtp_settings: Overrides for EMAIL_SETTINGS

    Returns:
        bool: True once every message was sent

    Raises:
        EmailConfigError: If SMTP settings are incomplete
        smtplib.SMTPException: If sending fails after retries
    """
    smtp_settings = dict(EMAIL_SETTINGS, **(smtp_settings or {}))
    validate_smtp_settings(smtp_settings)

    server = None
    try:
        server = create_smtp_connection(smtp_settings)
        for recipient in recipients:
            server.send_message(build_message(subject, body, recipient, smtp_settings))
        logger.info(f"Email sent successfully to {len(recipients)} recipient(s)")
        return True

    except Exception as e:
        logger.error(f"Failed to send email: {str(e)}")
        raise

    finally:
        if server:
            server.quit()


def admin_notification_html(email: str, total_subscribers: int) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 30px; text-align: center;">
        <h1 style="margin: 0 0 20px 0;">New Subscriber!</h1>
        <p style="font-size: 18px; font-weight: bold;">{email}</p>
        <p>Subscribed to your AI Blog updates</p>
        <p style="font-size: 14px; color: #64748b;">Total subscribers: {total_subscribers}</p>
    </div>
    """


def welcome_html() -> str:
    return """
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 30px; text-align: center;">
        <h1 style="margin: 0 0 20px 0;">Welcome to AI Blog!</h1>
        <h2>Thank you for subscribing!</h2>
        <p style="line-height: 1.6;">You'll now receive the latest AI-generated blog posts, tech insights,
        and innovative content directly in your inbox.</p>
        <p>Stay curious, stay updated!</p>
    </div>
    """


def send_subscription_emails(email: str, total_subscribers: int, smtp_settings: Optional[Dict[str, Any]] = None) -> bool:
    """Notify the admin about a new subscriber and welcome the subscriber."""
    smtp_settings = dict(EMAIL_SETTINGS, **(smtp_settings or {}))

    admin_email = smtp_settings.get('admin_email')
    if admin_email:
        send_email('New Blog Subscription!', admin_notification_html(email, total_subscribers),
                   [admin_email], smtp_settings)
    else:
        logger.warning("ADMIN_EMAIL not set, skipping subscription notification")

    return send_email('Welcome to AI Blog Updates!', welcome_html(), [email], smtp_settings)


def send_test_email() -> bool:
    """Send a test email to the admin address to verify configuration."""
    body = """
    <h1>Test Email</h1>
    <p>This is a test email to verify your blog mail configuration.</p>
    <p>If you received this, your email settings are working correctly!</p>
    """

    try:
        send_email('Auto Blogger - Test Email', body, [EMAIL_SETTINGS['admin_email'] or EMAIL_SETTINGS['sender_email']])
        logger.info("Test email sent successfully")
        return True
    except Exception as e:
        logger.error(f"Test email failed: {str(e)}")
        return False


__all__ = ['send_email', 'send_subscription_emails', 'send_test_email', 'EmailConfigError']
