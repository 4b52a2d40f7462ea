"""
Build-unit selection

Decides which units of a fixed, ordered catalog take part in one build run.
Selection is a single pass: resolve the suite dependency, take its exported
warning options as the suite-wide compile options, then keep each unit
whose required flags are all present and true. A flag nobody supplied reads
as false, so the unit is skipped rather than the run failing.
"""

import logging
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

from build_unit import ActivationRecord, BuildUnit
from capabilities import unknown_flags
from dependency import Dependency, DependencyUnresolved, PackageLocator

logger = logging.getLogger(__name__)


def is_active(unit: BuildUnit, flags: Mapping[str, bool]) -> bool:
    """Return True if unit takes part in a build with these flags."""
    return unit.is_enabled(flags)


def select(
    dependency: Dependency,
    flags: Mapping[str, bool],
    catalog: Sequence[BuildUnit],
    locator=None,
) -> Tuple[List[ActivationRecord], Optional[DependencyUnresolved]]:
    """
    Select the units of catalog that are active for flags.

    Args:
        dependency: Package the whole suite requires
        flags: Capability flag name -> bool; absent names read as false
        catalog: Ordered build units
        locator: Object with resolve(dependency); defaults to PackageLocator()

    Returns:
        Tuple of (activation records in catalog order, error). On a failed
        required dependency the list is empty and error is the
        DependencyUnresolved; otherwise error is None.
    """
    if locator is None:
        locator = PackageLocator()

    try:
        package = locator.resolve(dependency)
    except DependencyUnresolved as e:
        logger.debug(f"Selection aborted: {e}")
        return [], e

    compile_options = package.warning_flags if package is not None else ()

    frozen_flags = MappingProxyType(dict(flags))
    extra = unknown_flags(frozen_flags)
    if extra:
        logger.debug(f"Flags not used by any known unit: {', '.join(extra)}")

    records = []
    for unit in catalog:
        if is_active(unit, frozen_flags):
            records.append(ActivationRecord(unit=unit, compile_options=compile_options))
        else:
            missing = [f for f in unit.requires if not frozen_flags.get(f, False)]
            logger.debug(f"Skipping {unit.name}: requires {', '.join(missing)}")

    logger.debug(f"Selected {len(records)} of {len(catalog)} units")
    return records, None
