import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import env_manager

logger = logging.getLogger(__name__)

WARNING_FLAGS_VARIABLE = "CXX_BUILD_WARNING_FLAGS"

# Command names are case-insensitive, variable names are not
_SET_RE = r"[sS][eE][tT]\s*\(\s*{var}\s+(?P<value>[^)]*)\)"


@dataclass(frozen=True)
class Dependency:
    """An external package the whole suite build requires."""

    name: str
    min_version: Optional[str] = None
    required: bool = True

    def describe(self) -> str:
        if self.min_version:
            return f"{self.name} (>= {self.min_version})"
        return self.name


@dataclass(frozen=True)
class ResolvedPackage:
    """A located package and the option set it exports to the suite."""

    name: str
    version: Optional[str] = None
    config_path: Optional[Path] = None
    warning_flags: Tuple[str, ...] = ()


class DependencyUnresolved(RuntimeError):
    """A required dependency could not be located or satisfied."""

    def __init__(self, dependency: Dependency, reasons: Optional[List[str]] = None):
        self.dependency = dependency
        self.reasons = list(reasons or [])
        message = f"Required dependency '{dependency.describe()}' could not be resolved"
        if self.reasons:
            message += ": " + "; ".join(self.reasons)
        super().__init__(message)


def parse_version(text: str) -> Tuple[int, ...]:
    """Parse a dotted numeric version ("23.03.0") into a tuple of ints."""
    parts = text.strip().split(".")
    try:
        return tuple(int(p) for p in parts)
    except ValueError:
        raise ValueError(f"Invalid version string: '{text}'")


def version_satisfies(found: str, minimum: Optional[str]) -> bool:
    """Component-wise numeric comparison; missing components count as 0."""
    if not minimum:
        return True
    have = parse_version(found)
    want = parse_version(minimum)
    width = max(len(have), len(want))
    have += (0,) * (width - len(have))
    want += (0,) * (width - len(want))
    return have >= want


def _read_set_value(path: Path, variable: str) -> Optional[str]:
    match = re.search(_SET_RE.format(var=re.escape(variable)), path.read_text())
    if match is None:
        return None
    return match.group("value").strip()


def split_cmake_list(value: str) -> Tuple[str, ...]:
    """Split a CMake list value on ';' and whitespace, dropping quotes."""
    items = []
    for token in re.split(r"[;\s]+", value.replace('"', " ")):
        if token:
            items.append(token)
    return tuple(items)


class PackageLocator:
    """Finds an installed package by its CMake package config file.

    Search roots, in order: explicit prefixes, the <Name>_DIR environment
    variable, then each entry of CMAKE_PREFIX_PATH. The first candidate that
    exists and meets the minimum version wins.
    """

    def __init__(self, prefixes: Optional[List[str]] = None):
        self.prefixes = [str(p) for p in (prefixes or [])]

    def search_roots(self, name: str) -> List[Path]:
        roots = list(self.prefixes)
        package_dir = env_manager.get(f"{name}_DIR")
        if package_dir:
            roots.append(package_dir)
        roots.extend(env_manager.get_path_list("CMAKE_PREFIX_PATH"))
        return [Path(r).expanduser() for r in roots]

    @staticmethod
    def candidate_dirs(root: Path, name: str) -> List[Path]:
        return [
            root,
            root / "lib" / "cmake" / name,
            root / "lib64" / "cmake" / name,
            root / "share" / name / "cmake",
            root / "share" / "cmake" / name,
        ]

    @staticmethod
    def _find_config(directory: Path, name: str) -> Optional[Path]:
        for filename in (f"{name}Config.cmake", f"{name.lower()}-config.cmake"):
            path = directory / filename
            if path.is_file():
                return path
        return None

    @staticmethod
    def _read_version(config_path: Path, name: str) -> Optional[str]:
        directory = config_path.parent
        for filename in (f"{name}ConfigVersion.cmake", f"{name.lower()}-config-version.cmake"):
            path = directory / filename
            if path.is_file():
                value = _read_set_value(path, "PACKAGE_VERSION")
                if value:
                    return value.strip('"')
        return None

    def _load(self, config_path: Path, name: str) -> ResolvedPackage:
        flags_value = _read_set_value(config_path, WARNING_FLAGS_VARIABLE)
        return ResolvedPackage(
            name=name,
            version=self._read_version(config_path, name),
            config_path=config_path,
            warning_flags=split_cmake_list(flags_value) if flags_value else (),
        )

    def find(self, dependency: Dependency) -> Tuple[Optional[ResolvedPackage], List[str]]:
        """Search for the package.

        Returns:
            Tuple of (package or None, list of reasons candidates were rejected)
        """
        reasons = []
        roots = self.search_roots(dependency.name)
        if not roots:
            reasons.append(
                f"no search roots (set {dependency.name}_DIR or CMAKE_PREFIX_PATH)"
            )

        for root in roots:
            for directory in self.candidate_dirs(root, dependency.name):
                config_path = self._find_config(directory, dependency.name)
                if config_path is None:
                    continue
                logger.debug(f"Found candidate config: {config_path}")

                package = self._load(config_path, dependency.name)
                if dependency.min_version:
                    if package.version is None:
                        reasons.append(f"{config_path}: version unknown")
                        continue
                    try:
                        ok = version_satisfies(package.version, dependency.min_version)
                    except ValueError as e:
                        reasons.append(f"{config_path}: {e}")
                        continue
                    if not ok:
                        reasons.append(
                            f"{config_path}: version {package.version} is older than "
                            f"{dependency.min_version}"
                        )
                        continue
                return package, reasons

        if roots and not reasons:
            searched = ", ".join(str(r) for r in roots)
            reasons.append(f"no {dependency.name}Config.cmake under {searched}")
        return None, reasons

    def resolve(self, dependency: Dependency) -> Optional[ResolvedPackage]:
        """
        Locate the dependency once.

        Returns:
            The resolved package, or None for an optional dependency that
            was not found

        Raises:
            DependencyUnresolved: If a required dependency was not found
        """
        package, reasons = self.find(dependency)
        if package is not None:
            logger.info(
                f"Found {package.name} {package.version or '(unknown version)'} "
                f"at {package.config_path}"
            )
            return package

        if dependency.required:
            raise DependencyUnresolved(dependency, reasons)
        logger.info(f"Optional dependency {dependency.name} not found")
        return None


class InTreeLocator:
    """Resolves a dependency that is being built in the same tree.

    No search is performed; the caller supplies the source directory and the
    warning options the in-tree build exports.
    """

    def __init__(self, source_dir: str, warning_flags: Optional[List[str]] = None):
        self.source_dir = os.path.abspath(source_dir)
        self.warning_flags = tuple(warning_flags or ())

    def resolve(self, dependency: Dependency) -> ResolvedPackage:
        if not os.path.isdir(self.source_dir):
            raise DependencyUnresolved(
                dependency, [f"source directory not found: {self.source_dir}"]
            )
        logger.info(f"Using in-tree {dependency.name} at {self.source_dir}")
        return ResolvedPackage(name=dependency.name, warning_flags=self.warning_flags)
