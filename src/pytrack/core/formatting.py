"""
Comment body formatting.

Bodies are stored as typed (trimmed) alongside a sanitized HTML rendering.
Markdown is rendered with ``markdown`` and the result is cleaned with ``nh3``
so only the allow-listed tags and attributes survive.
"""

import markdown
import nh3

ALLOWED_TAGS: set[str] = {
    "a",
    "b",
    "blockquote",
    "br",
    "code",
    "em",
    "i",
    "li",
    "ol",
    "p",
    "pre",
    "strong",
    "u",
    "ul",
}
ALLOWED_ATTRIBUTES: dict[str, set[str]] = {
    "a": {"href", "title"},
}


def sanitize_html(content: str) -> str:
    """Remove every tag and attribute outside the allow-list."""
    if not content:
        return content
    return nh3.clean(content, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES)


def format_body(text: str | None) -> tuple[str | None, str | None]:
    """
    Normalize a comment body and render its HTML.

    Args:
        text: Raw body as submitted

    Returns:
        Tuple of (body, body_html); both None when the body is blank
    """
    if text is None:
        return None, None
    body = text.strip()
    if not body:
        return None, None
    html = markdown.markdown(body, extensions=["fenced_code", "nl2br"])
    return body, sanitize_html(html)
