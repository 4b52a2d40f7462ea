"""
Capability flags

Named boolean switches supplied by the enclosing build configuration. A flag
set is a plain mapping of flag name to bool; names not present evaluate to
false wherever a build unit asks for them.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import env_manager

logger = logging.getLogger(__name__)

HDF5_ENABLED = "hdf5Enabled"
SCRIPTING_BINDINGS_ENABLED = "scriptingBindingsEnabled"
MULTI_NODE_NETWORKING_ENABLED = "multiNodeNetworkingEnabled"

KNOWN_FLAGS = (
    HDF5_ENABLED,
    SCRIPTING_BINDINGS_ENABLED,
    MULTI_NODE_NETWORKING_ENABLED,
)

# Cache variables of the enclosing build that carry each flag
CACHE_VARIABLES = {
    HDF5_ENABLED: "Legion_USE_HDF5",
    SCRIPTING_BINDINGS_ENABLED: "Legion_USE_Python",
    MULTI_NODE_NETWORKING_ENABLED: "Legion_NETWORKS",
}

_FALSE_CONSTANTS = frozenset(["", "0", "OFF", "NO", "FALSE", "N", "IGNORE", "NOTFOUND"])


def is_truthy(value) -> bool:
    """Evaluate a cache value the way CMake's if(<variable>) does.

    False constants: empty, 0, OFF, NO, FALSE, N, IGNORE, NOTFOUND and any
    string ending in -NOTFOUND. Every other value is true, including "0.0"
    and "00", so a network list like "gasnetex" counts as enabled.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value

    upper = str(value).strip().upper()
    return not (upper in _FALSE_CONSTANTS or upper.endswith("-NOTFOUND"))


def parse_flag_assignment(text: str) -> Tuple[str, bool]:
    """Parse "name=value" (or a bare "name", meaning true) into (name, bool)."""
    name, sep, value = text.partition("=")
    name = name.strip()
    if not name:
        raise ValueError(f"Invalid flag assignment: '{text}'. Expected NAME[=VALUE]")
    if not sep:
        return name, True
    return name, is_truthy(value)


def flags_from_cache(variables: Mapping[str, object]) -> Dict[str, bool]:
    """Map cache variables (Legion_USE_HDF5, ...) onto capability flags.

    Variables that are absent are left out; they still read as false.
    """
    flags = {}
    for flag, variable in CACHE_VARIABLES.items():
        if variable in variables:
            flags[flag] = is_truthy(variables[variable])
    return flags


def flags_from_env() -> Dict[str, bool]:
    variables = {}
    for variable in CACHE_VARIABLES.values():
        value = env_manager.get(variable)
        if value is not None:
            variables[variable] = value
    return flags_from_cache(variables)


def merge_flags(*sources: Optional[Mapping[str, bool]]) -> Dict[str, bool]:
    """Combine flag sets into a new dict; later sources override earlier ones."""
    merged: Dict[str, bool] = {}
    for source in sources:
        if source:
            merged.update({name: bool(value) for name, value in source.items()})
    return merged


def unknown_flags(flags: Iterable[str]) -> List[str]:
    """Return flag names that no shipped catalog knows about."""
    return sorted(name for name in flags if name not in KNOWN_FLAGS)
