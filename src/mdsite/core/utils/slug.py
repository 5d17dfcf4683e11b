"""Slug generation for content identifiers and URL segments"""

import re
import unicodedata


def slugify(text: str) -> str:
    """Lowercase ASCII, hyphen-separated slug; accents are folded ('Café' -> 'cafe')."""
    text = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    text = re.sub(r'[^\w\s.-]', '', text.lower())
    text = re.sub(r'[\s_.]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')
