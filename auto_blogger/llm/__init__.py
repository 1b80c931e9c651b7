"""LLM package exports."""
from auto_blogger.llm.generator import BlogGenerator, BlogGenerationError
from auto_blogger.llm.prompts import (
    format_prompt,
    format_summary_prompt,
    format_topic_prompt,
    generate_meta_prompt
)
from auto_blogger.llm.utils import retry_with_backoff

__all__ = [
    'BlogGenerator',
    'BlogGenerationError',
    'format_prompt',
    'format_summary_prompt',
    'format_topic_prompt',
    'generate_meta_prompt',
    'retry_with_backoff'
]
