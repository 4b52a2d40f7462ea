import os
from typing import Dict, List, Optional

_cache: Dict[str, Optional[str]] = {}


def get(name: str) -> Optional[str]:
    """Return the env var value, caching it. None if the variable is absent."""
    if name not in _cache:
        _cache[name] = os.environ.get(name)
    return _cache[name]


def get_path_list(name: str) -> List[str]:
    """Split a search-path env var (e.g. CMAKE_PREFIX_PATH) into its entries."""
    value = get(name)
    if not value:
        return []
    return [p for p in value.split(os.pathsep) if p]


def clear() -> None:
    """Drop cached values so the next lookup re-reads the environment."""
    _cache.clear()
