"""System prompts and prompt builders for LLM interactions."""
from datetime import datetime
from typing import List, Optional
from auto_blogger.core.types import Article
from auto_blogger.feeds.gnews_api import parse_article_date

BLOG_SYSTEM_PROMPT = """You are a professional tech and business blogger.
Your posts should:
- Be engaging, well structured and SEO friendly
- Stay faithful to the supplied sources
- Avoid claims the sources do not support"""


def _format_long_date(value: Optional[datetime]) -> str:
    if value is None:
        return 'Unknown date'
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_prompt(articles: List[Article], topic: Optional[str] = None, today: Optional[datetime] = None) -> str:
    """Build the main blog post prompt from a list of articles."""
    current_date = _format_long_date(today or datetime.now())

    article_blocks = []
    for index, article in enumerate(articles, 1):
        lines = [
            f"Article {index}:",
            f"Title: {article.get('title', '')}",
            f"Description: {article.get('description', '')}",
            f"Source: {(article.get('source') or {}).get('name', 'Unknown')}",
            f"Published: {_format_long_date(parse_article_date(article.get('published_at')))}",
        ]
        if article.get('content'):
            lines.append(f"Content: {article['content']}")
        article_blocks.append("\n".join(lines))

    topic_section = ""
    if topic:
        topic_section = (
            f"Primary Focus: {topic}\n"
            f"Please ensure the blog post specifically addresses trends and developments related to {topic}.\n"
        )

    return f"""Write a comprehensive, engaging blog post based on the following recent news articles.

Date: {current_date}
{topic_section}
News Articles:
{chr(10).join(article_blocks)}

Instructions:
1. Create an engaging, SEO-friendly title on the first line
2. Write a comprehensive blog post (800-1200 words) that:
   - Analyzes the trends and patterns from these articles
   - Provides insightful commentary and context
   - Uses a professional yet accessible tone
   - Includes relevant subheadings
   - Connects different stories where applicable
3. Focus on implications for businesses, consumers, or society
4. Maintain journalistic integrity - don't make claims beyond what's supported
5. Make it engaging and informative for a general tech-savvy audience

Format the response as a well-structured blog post with:
- A compelling headline
- An engaging introduction
- Well-organized body sections with subheadings
- A thoughtful conclusion
- Natural integration of the source information

Do not include a separate summary or metadata - just the blog post content itself."""


def format_summary_prompt(articles: List[Article]) -> str:
    articles_text = "\n".join(f"{a.get('title', '')} - {a.get('description', '')}" for a in articles)
    return f"""Create a brief, engaging summary (2-3 sentences) of the main themes and trends from these news articles:

{articles_text}

Focus on the key developments and their potential impact."""


def format_topic_prompt(articles: List[Article], specific_topic: str) -> str:
    articles_text = "\n".join(f"- {a.get('title', '')}: {a.get('description', '')}" for a in articles)
    return f"""Based on these news articles:
{articles_text}

Write a focused blog post about {specific_topic}. Put the title on the first line.

Guidelines:
- Length: 600-800 words
- Focus specifically on {specific_topic} aspects
- Use evidence from the provided articles
- Provide analysis and insights
- Include actionable takeaways where relevant
- Maintain professional tone"""


def generate_meta_prompt(blog_content: str) -> str:
    return f"""Based on this blog post content, generate:
1. An SEO meta description (150-160 characters)
2. 5-7 relevant tags/keywords
3. A social media friendly title (under 60 characters)

Blog content:
{blog_content[:500]}...

Respond with JSON only, using the keys: meta_description, tags, social_title"""
