"""Cache key construction for GitHub API calls."""

from __future__ import annotations

from typing import Any, Mapping, Optional

KEY_NAMESPACE = "github"


def _render(value: Any) -> str:
    # JSON spelling for the scalars whose str() differs from it
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_cache_key(endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build a deterministic cache key for an endpoint and its parameters.

    Parameters are sorted by name, so the same logical request always maps
    to the same key regardless of the order the caller supplied them in.

    Examples:
        >>> build_cache_key("rate_limit")
        'github:rate_limit'
        >>> build_cache_key("repos", {"repo": "octo/hello", "a": 1})
        'github:repos?a=1&repo=octo/hello'
    """
    base_key = f"{KEY_NAMESPACE}:{endpoint}"
    if not params:
        return base_key

    param_string = "&".join(
        f"{key}={_render(value)}" for key, value in sorted(params.items(), key=lambda kv: kv[0])
    )
    return f"{base_key}?{param_string}"
