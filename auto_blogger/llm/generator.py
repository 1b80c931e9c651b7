"""Blog post generation using the OpenAI API."""
import json
import re
import time
from typing import List, Optional, Dict, Any
from urllib.parse import urlparse
from auto_blogger.config.settings import LLM_SETTINGS
from auto_blogger.core.types import Article, BlogDraft, MetaData
from auto_blogger.core.text_utils import count_words, estimate_read_time, truncate
from auto_blogger.core.constants import (
    COMMON_TAGS,
    DEFAULT_TAGS,
    DEFAULT_BLOG_TITLE,
    DEFAULT_EXCERPT,
    EXCERPT_PREVIEW_LENGTH,
    PREFERRED_IMAGE_SOURCES,
    IMAGE_EXTENSIONS,
    IMAGE_URL_HINTS
)
from auto_blogger.llm.prompts import (
    BLOG_SYSTEM_PROMPT,
    format_prompt,
    format_topic_prompt,
    format_summary_prompt,
    generate_meta_prompt
)
from auto_blogger.llm.utils import retry_with_backoff, create_client
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()

MIN_TITLE_LENGTH = 10
HEADING_MARKERS = re.compile(r'^\s*#+\s*')
CODE_FENCE = re.compile(r'^```(?:json)?\s*|\s*```$')


class BlogGenerationError(Exception):
    """Raised when a blog post cannot be generated."""
    pass


def clean_heading(line: str) -> str:
    """Strip markdown heading and emphasis markers from a line."""
    cleaned = HEADING_MARKERS.sub('', line).strip()
    cleaned = cleaned.strip('*_').strip()
    if cleaned.lower().startswith('title:'):
        cleaned = cleaned[len('title:'):].strip()
    return cleaned


class BlogGenerator:
    """Turns groups of news articles into blog drafts."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client=None):
        self.api_key = api_key or LLM_SETTINGS['api_key']
        self.model = model or LLM_SETTINGS['model']
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self.validate_api_key()
            self._client = create_client(self.api_key)
        return self._client

    def validate_api_key(self) -> None:
        if not self.api_key:
            raise BlogGenerationError('OpenAI API key is required. Please set OPENAI_API_KEY in your .env file')

    def _create_completion(self, prompt: str, max_tokens: int) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": BLOG_SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            max_tokens=max_tokens,
            temperature=LLM_SETTINGS['temperature']
        )
        return (response.choices[0].message.content or '').strip()

    def complete(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        """Send a prompt with retry and exponential backoff."""
        call = retry_with_backoff(
            max_retries=LLM_SETTINGS['max_retries'],
            base_delay=LLM_SETTINGS['retry_base_delay']
        )(self._create_completion)
        return call(prompt, max_tokens or LLM_SETTINGS['max_tokens'])

    def generate_blog_post(self, articles: List[Article], topic: Optional[str] = None, focused: bool = False) -> BlogDraft:
        """
        Generate a blog draft from a list of articles.

        Args:
            articles: Source articles (at least one)
            topic: Optional focus topic woven into the prompt
            focused: Use the shorter single-topic prompt instead of the full analysis prompt

        Returns:
            Parsed blog draft with featured image information

        Raises:
            BlogGenerationError: On missing configuration, empty input or LLM failure
        """
        self.validate_api_key()

        if not articles:
            raise BlogGenerationError('No articles provided for blog generation')

        if focused and topic:
            prompt = format_topic_prompt(articles, topic)
        else:
            prompt = format_prompt(articles, topic)

        try:
            blog_content = self.complete(prompt)
        except Exception as e:
            logger.error(f"Error generating blog post: {str(e)}")
            raise BlogGenerationError(f"Failed to generate blog post: {str(e)}") from e

        if not blog_content:
            raise BlogGenerationError('Failed to generate blog post: empty response from model')

        draft = self.parse_blog_content(blog_content)
        selected_image = self.select_best_image(articles)
        draft['featured_image'] = selected_image['url']
        draft['image_metadata'] = selected_image['metadata']
        return draft

    def generate_multiple_blogs(
        self,
        article_groups: List[List[Article]],
        topics: Optional[List[Optional[str]]] = None,
        delay: float = 2.0
    ) -> List[BlogDraft]:
        topics = topics or []
        blogs = []

        for i, articles in enumerate(article_groups):
            topic = topics[i] if i < len(topics) else None
            blogs.append(self.generate_blog_post(articles, topic))

            if delay and i < len(article_groups) - 1:
                time.sleep(delay)

        return blogs

    def parse_blog_content(self, content: str) -> BlogDraft:
        """Split raw model output into title, excerpt, body and tags."""
        lines = content.splitlines()

        title = ''
        title_index = -1
        for i, line in enumerate(lines):
            candidate = clean_heading(line)
            if len(candidate) > MIN_TITLE_LENGTH:
                title = candidate
                title_index = i
                break

        if title_index >= 0:
            body = "\n".join(lines[title_index + 1:]).strip()
        else:
            body = content.strip()
            first_line = next((clean_heading(l) for l in lines if l.strip()), '')
            if first_line:
                title = first_line[:100] + '...'

        excerpt = ''
        for paragraph in re.split(r'\n\s*\n', body):
            paragraph = paragraph.strip()
            if not paragraph or paragraph.startswith('#'):
                continue
            excerpt = truncate(" ".join(paragraph.split()), EXCERPT_PREVIEW_LENGTH)
            break

        content_lower = content.lower()
        tags = [tag for tag in COMMON_TAGS if re.search(rf'\b{re.escape(tag)}\b', content_lower)]

        final_body = body or content
        word_count = count_words(final_body)

        return {
            'title': title or DEFAULT_BLOG_TITLE,
            'excerpt': excerpt or DEFAULT_EXCERPT,
            'content': final_body,
            'tags': tags or list(DEFAULT_TAGS),
            'word_count': word_count,
            'estimated_read_time': estimate_read_time(word_count)
        }

    def select_best_image(self, articles: List[Article]) -> Dict[str, Any]:
        """Choose a featured image, preferring well-known sources."""
        with_images = [
            a for a in articles
            if a.get('image') and a['image'].strip() and self.is_valid_image_url(a['image'])
        ]

        if not with_images:
            return {
                'url': None,
                'metadata': {
                    'alt': 'Blog post image',
                    'source': 'Generated content',
                    'caption': 'AI-generated blog content'
                }
            }

        chosen = next(
            (a for a in with_images if (a.get('source') or {}).get('name') in PREFERRED_IMAGE_SOURCES),
            with_images[0]
        )
        source_name = (chosen.get('source') or {}).get('name') or 'News Source'
        title = chosen.get('title', '')

        return {
            'url': chosen['image'],
            'metadata': {
                'alt': f"{title[:100]}...",
                'source': source_name,
                'caption': f"Image from {source_name}: {title[:80]}..."
            }
        }

    @staticmethod
    def is_valid_image_url(url: str) -> bool:
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            return False

        path = parsed.path.lower()
        return (
            any(ext in path for ext in IMAGE_EXTENSIONS)
            or any(hint in url for hint in IMAGE_URL_HINTS)
            or 'cdn' in (parsed.hostname or '')
        )

    def generate_summary(self, articles: List[Article]) -> str:
        try:
            return self.complete(format_summary_prompt(articles), max_tokens=200)
        except Exception as e:
            logger.error(f"Error generating summary: {str(e)}")
            return 'Summary unavailable'

    def generate_metadata(self, blog_content: str) -> Optional[MetaData]:
        """Ask the model for SEO metadata; returns None when unusable."""
        try:
            raw = self.complete(generate_meta_prompt(blog_content), max_tokens=300)
            data = json.loads(CODE_FENCE.sub('', raw.strip()))
        except Exception as e:
            logger.warning(f"Could not generate blog metadata: {str(e)}")
            return None

        if not isinstance(data, dict):
            logger.warning("Blog metadata response was not a JSON object")
            return None

        tags = data.get('tags') or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(',')]

        return {
            'meta_description': str(data.get('meta_description', '')).strip(),
            'social_title': str(data.get('social_title', '')).strip(),
            'keywords': [str(t).strip().lower() for t in tags if str(t).strip()]
        }
