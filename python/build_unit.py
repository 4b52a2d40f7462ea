from dataclasses import dataclass
from typing import Mapping, Tuple


@dataclass(frozen=True)
class BuildUnit:
    """An independently buildable subproject of a suite.

    name is the subproject path relative to the suite root
    (e.g. "performance/realm/event_latency"). An empty requires tuple
    means the unit is unconditional.
    """

    name: str
    requires: Tuple[str, ...] = ()

    def is_enabled(self, flags: Mapping[str, bool]) -> bool:
        """True iff every required flag is present and true."""
        return all(bool(flags.get(flag, False)) for flag in self.requires)


@dataclass(frozen=True)
class ActivationRecord:
    """A unit selected for this run, with the suite-wide compile options attached."""

    unit: BuildUnit
    compile_options: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.unit.name

    def to_dict(self) -> dict:
        return {
            "name": self.unit.name,
            "requires": list(self.unit.requires),
            "compile_options": list(self.compile_options),
        }
