"""Front matter block splitting, YAML loading, and re-serialization"""

from typing import Any

import yaml

from mdsite.core.errors import MalformedFrontMatter, MissingFrontMatter


DELIMITER = "---"


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r\n").rstrip() == DELIMITER


def split_front_matter(text: str, path=None) -> tuple[str, str]:
    """Return (front_matter_block, body).

    The first line must be the delimiter; the block ends at the next delimiter
    line. The body is everything after that line, untouched.
    """
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        raise MissingFrontMatter("file does not start with a '---' front matter line", path)

    for i in range(1, len(lines)):
        if _is_delimiter(lines[i]):
            return "".join(lines[1:i]), "".join(lines[i + 1:])
    raise MalformedFrontMatter("front matter has no closing '---' line", path)


def load_front_matter(block: str, path=None) -> dict[str, Any]:
    """Parse a front matter block as a YAML mapping; an empty block is {}."""
    try:
        data = yaml.safe_load(block) if block.strip() else {}
    except (yaml.YAMLError, ValueError) as e:   # ValueError: impossible timestamps like 2025-13-45
        raise MalformedFrontMatter(f"invalid YAML front matter: {e}", path) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedFrontMatter(
            f"front matter must be a mapping, got {type(data).__name__}", path
        )
    return data


def dump_front_matter(data: dict[str, Any], body: str) -> str:
    """Inverse of split_front_matter + load_front_matter."""
    header = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"{DELIMITER}\n{header}{DELIMITER}\n{body}"
