import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Iterable, Mapping, Tuple

from build_unit import BuildUnit
from dependency import Dependency


def load_build_config(config_path: Path) -> ModuleType:
    """Import a suite's build_config.py and return the module."""
    spec = importlib.util.spec_from_file_location("build_config", config_path)
    build_config_module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(build_config_module)
    return build_config_module


def catalog_from_config(entries: Iterable[Mapping]) -> Tuple[BuildUnit, ...]:
    """
    Turn BUILD_CATALOG entries into an ordered tuple of BuildUnit.

    Each entry is {"name": <subproject path>, "requires": [<flag>, ...]};
    "requires" may be omitted for unconditional units.

    Raises:
        ValueError: On a missing name, a malformed requires list, or a
            duplicate unit name
    """
    units = []
    seen = set()
    for index, entry in enumerate(entries):
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Catalog entry {index} has no name: {entry!r}")

        requires = entry.get("requires", [])
        if isinstance(requires, str) or not isinstance(requires, (list, tuple)):
            raise ValueError(
                f"Catalog entry '{name}': requires must be a list of flag names"
            )
        if not all(isinstance(flag, str) and flag for flag in requires):
            raise ValueError(
                f"Catalog entry '{name}': requires must be a list of flag names"
            )

        if name in seen:
            raise ValueError(f"Duplicate catalog entry: '{name}'")
        seen.add(name)
        units.append(BuildUnit(name=name, requires=tuple(requires)))
    return tuple(units)


def dependency_from_config(entry: Mapping) -> Dependency:
    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError(f"Dependency has no name: {entry!r}")
    return Dependency(
        name=name,
        min_version=entry.get("min_version"),
        required=bool(entry.get("required", True)),
    )
