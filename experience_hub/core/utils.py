import re
from typing import Iterable
from urllib.parse import urlsplit

MAX_TAGS = 10
MAX_TAG_LENGTH = 20
TAG_SEPARATOR = ","

GITHUB_HOSTS = {"github.com", "www.github.com"}
GITHUB_NAME_REGEX = re.compile(r"^[A-Za-z0-9_.-]+$")
GITHUB_SUBPATHS = {
    "tree",
    "blob",
    "releases",
    "issues",
    "pull",
    "wiki",
    "commits",
    "tags",
    "branches",
    "discussions",
    "actions",
}
MALICIOUS_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"javascript:",
        r"vbscript:",
        r"data:text/html",
        r"<script",
        r"onload=",
        r"onerror=",
    )
]


def round_rating(value: float | None) -> float:
    """Presentation rounding for stored full-precision averages"""
    if not value:
        return 0.0
    return round(float(value), 2)


def normalize_tag(tag: str) -> str:
    tag = tag.strip().lower().lstrip("#")
    tag = re.sub(r"[\s_.]+", "-", tag)
    tag = re.sub(r"[^a-z0-9-]", "", tag)
    tag = re.sub(r"-+", "-", tag).strip("-")
    return tag


def normalize_tags(tags: Iterable[str] | str | None) -> list[str]:
    """Normalise, de-duplicate (first occurrence wins) and cap a tag list"""
    if not tags:
        return []

    if isinstance(tags, str):
        tags = tags.split(TAG_SEPARATOR)

    result: list[str] = []
    for raw in tags:
        for part in str(raw).split(TAG_SEPARATOR):
            tag = normalize_tag(part)
            if not tag or len(tag) > MAX_TAG_LENGTH or tag in result:
                continue
            result.append(tag)

    return result[:MAX_TAGS]


def serialize_tags(tags: Iterable[str] | None) -> str:
    return TAG_SEPARATOR.join(normalize_tags(list(tags or [])))


def parse_tags(stored: str | None) -> list[str]:
    if not stored:
        return []
    return [tag for tag in stored.split(TAG_SEPARATOR) if tag]


def normalize_github_url(url: str) -> str:
    """
    Validate a GitHub repository URL and return its canonical form.

    Raises ValueError when the URL does not point at a repository on the
    github.com host.
    """
    if not url or not isinstance(url, str):
        raise ValueError("GitHub URL is required")

    url = url.strip()

    if any(pattern.search(url) for pattern in MALICIOUS_PATTERNS):
        raise ValueError("GitHub URL contains disallowed content")

    if ".." in url:
        raise ValueError("GitHub URL must not contain path traversal")

    parts = urlsplit(url)

    if parts.scheme != "https":
        raise ValueError("GitHub URL must use https")

    if parts.username or parts.password or parts.port:
        raise ValueError("GitHub URL must not contain credentials or a port")

    if (parts.hostname or "").lower() not in GITHUB_HOSTS:
        raise ValueError("URL must point to github.com")

    path_parts = [part for part in parts.path.split("/") if part]
    if len(path_parts) < 2:
        raise ValueError("GitHub URL must include an owner and a repository")

    owner, repo = path_parts[0], path_parts[1]
    for name in (owner, repo):
        if not GITHUB_NAME_REGEX.match(name) or name[0] in ".-" or name[-1] in ".-":
            raise ValueError("Invalid GitHub owner or repository name")

    if len(path_parts) > 2 and path_parts[2] not in GITHUB_SUBPATHS:
        raise ValueError(f"Unsupported GitHub path: {path_parts[2]}")

    return "https://github.com/" + "/".join(path_parts)
