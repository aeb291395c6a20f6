"""Merge scraped posts into one analysis corpus."""

from .sources.post import ExtractedPost

POST_SEPARATOR = "\n\n"


def merge_posts(posts: list[ExtractedPost]) -> str:
    """Join the text of successfully scraped posts, in input order.

    Posts with an error or without text are skipped. Returns "" when nothing
    usable was scraped.
    """
    texts = [post.text for post in posts if post.error is None and post.text]
    return POST_SEPARATOR.join(texts).strip()


def truncate_text(text: str, max_length: int = 280) -> str:
    """Shorten text to max_length characters, ending with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
