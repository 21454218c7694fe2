"""Clean and normalize scraped text before it reaches the Structuring Engine."""

import html
import re

from bs4 import BeautifulSoup

BLOCK_TAGS = ("p", "div", "li", "tr", "ul", "ol", "h1", "h2", "h3", "h4", "section", "article")


def clean_page_text(html_text: str, max_chars: int = 12000) -> str:
    """
    Clean raw HTML/text into readable plain text for LLM consumption.
    Removes scripts, styles, excessive whitespace, and truncates if needed.
    Used for JSON-LD descriptions, which usually embed HTML markup.
    """
    if not html_text or not html_text.strip():
        return ""

    # JSON-LD descriptions are sometimes entity-escaped markup
    if "&lt;" in html_text:
        html_text = html.unescape(html_text)

    soup = BeautifulSoup(html_text, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    # Block elements become line breaks so list and section structure survives
    for tag in soup.find_all(list(BLOCK_TAGS)):
        tag.insert_before("\n")
        tag.insert_after("\n")
    text = soup.get_text()

    text = re.sub(r"[ \t\xa0]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = text.strip()

    if len(text) > max_chars:
        text = text[:max_chars]
    return text


def collapse_whitespace(text: str) -> str:
    """Single-line form of scraped element text (titles, company names, locations)."""
    return re.sub(r"\s+", " ", text or "").strip()
