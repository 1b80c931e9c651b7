"""Text processing utilities."""
import math
from bs4 import BeautifulSoup
from auto_blogger.core.constants import WORDS_PER_MINUTE


def strip_html(html: str) -> str:
    """
    Convert HTML to plain text by removing HTML tags keeping one line per text block.

    Args:
        html: HTML content to convert

    Returns:
        Plain text version of the HTML content
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for script in soup(["script", "style"]):
        script.decompose()

    text = soup.get_text(separator="\n")
    lines = (line.strip() for line in text.splitlines())
    chunks = (phrase.strip() for line in lines for phrase in line.split("  "))

    return "\n".join(chunk for chunk in chunks if chunk)


def count_words(text: str) -> int:
    return len((text or '').split())


def estimate_read_time(word_count: int) -> int:
    """Minutes at WORDS_PER_MINUTE, never less than one."""
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def truncate(text: str, length: int, suffix: str = '...') -> str:
    if len(text) <= length:
        return text
    return text[:length] + suffix
