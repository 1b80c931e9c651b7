"""Utility functions for LLM operations."""
import time
from openai import OpenAI
from functools import wraps
from typing import Any, Callable, TypeVar, Optional
from auto_blogger.config.settings import LLM_SETTINGS
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()

T = TypeVar('T')


def retry_with_backoff(max_retries: int = 3, base_delay: float = 1.0) -> Callable:
    """Decorator for retrying functions with exponential backoff."""
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if attempt == max_retries - 1:  # Last attempt
                        raise
                    delay = base_delay * (2 ** attempt)
                    logger.warning(f"{func.__name__} failed (attempt {attempt + 1}/{max_retries}): {e}. Retrying in {delay}s")
                    time.sleep(delay)
            raise RuntimeError("Should not reach here")
        return wrapper
    return decorator


def create_client(api_key: Optional[str] = None) -> OpenAI:
    return OpenAI(api_key=api_key or LLM_SETTINGS['api_key'])


def check_openai_connection() -> bool:
    """Test OpenAI API connectivity.

    Returns:
        bool: True if connection successful

    Raises:
        Exception: If connection test fails
    """
    api_key = LLM_SETTINGS['api_key']
    if not api_key:
        raise Exception("OpenAI API key not found")

    try:
        client = create_client(api_key)
        response = client.chat.completions.create(
            model=LLM_SETTINGS['model'],
            messages=[{"role": "user", "content": "ping"}],
            max_tokens=1
        )

        if not getattr(response, 'choices', None):
            raise Exception("Invalid API response structure")

        return True

    except Exception as e:
        raise Exception(f"OpenAI API connection failed: {str(e)}") from e
