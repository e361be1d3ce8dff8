"""Helpers for addressing files in the catalog repository."""

import posixpath


RAW_BASE_URL = "https://raw.githubusercontent.com/"
RAW_BRANCH_PATH = "refs/heads/main"

_PREFIXES = ("https://", "http://", "git@", "github.com/")


def org_repo(repo: str) -> str:
    """Normalize a repository reference to ``org/repo``.

    Accepts ``https://github.com/o/r``, ``http://...``, ``git@github.com/o/r.git``
    and ``github.com/o/r`` forms.
    """
    result = repo.strip()
    for prefix in _PREFIXES:
        if result.startswith(prefix):
            result = result[len(prefix):]
    # git@github.com:o/r form
    if result.startswith("github.com:"):
        result = result[len("github.com:"):]
    if result.endswith(".git"):
        result = result[:-len(".git")]
    return result.rstrip("/")


def raw_url(repo: str, *paths: str) -> str:
    """Build the raw content URL for ``paths`` inside ``repo``."""
    return RAW_BASE_URL + org_repo(repo) + "/" + posixpath.join(RAW_BRANCH_PATH, *(p.lstrip("/") for p in paths))
