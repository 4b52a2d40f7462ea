import json
import logging
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from build_unit import ActivationRecord
from catalog import catalog_from_config, dependency_from_config, load_build_config
from dependency import Dependency
from unit_selector import select

logger = logging.getLogger(__name__)


class SuiteConfigurator:
    """Discovers test suites from src/suites/ and selects their build units.

    Each suite directory holds a build_config.py declaring DEPENDENCY (the
    package the whole suite needs) and BUILD_CATALOG (the ordered units).
    Selection happens once per configure() call and always completes before
    any unit is handed to the external build step.
    """

    def __init__(self, suites_dir: Optional[Path] = None, locator=None):
        """
        Initialize SuiteConfigurator.

        Args:
            suites_dir: Directory containing <suite>/build_config.py entries.
                Defaults to src/suites/ under the project root.
            locator: Object with resolve(dependency), passed to select()
        """
        if suites_dir is None:
            suites_dir = Path(__file__).parent.parent / "src" / "suites"
        self.suites_dir = Path(suites_dir)
        self.locator = locator

        # Discover available suites
        self._suites = {}
        if self.suites_dir.is_dir():
            for entry in sorted(self.suites_dir.iterdir()):
                config_path = entry / "build_config.py"
                if entry.is_dir() and config_path.is_file():
                    self._suites[entry.name] = config_path

    def list_suites(self) -> list:
        """Return names of discovered suites."""
        return list(self._suites.keys())

    def _load(self, name: str):
        if name not in self._suites:
            available = ", ".join(self._suites.keys()) or "(none)"
            raise ValueError(
                f"Suite '{name}' not found. Available suites: {available}"
            )
        return load_build_config(self._suites[name])

    def get_catalog(self, name: str) -> tuple:
        return catalog_from_config(self._load(name).BUILD_CATALOG)

    def get_dependency(self, name: str) -> Dependency:
        return dependency_from_config(self._load(name).DEPENDENCY)

    def configure(
        self,
        name: str,
        flags: Mapping[str, bool],
        handoff: Optional[Callable[[ActivationRecord], None]] = None,
    ) -> List[ActivationRecord]:
        """
        Select the active units of a suite and hand them to the build step.

        Args:
            name: Suite name (e.g. 'test')
            flags: Capability flags for this run
            handoff: Called once per activated unit, in catalog order

        Returns:
            Activation records in catalog order

        Raises:
            ValueError: If the named suite is not found or its config is malformed
            DependencyUnresolved: If the suite's dependency cannot be resolved
        """
        build_config = self._load(name)
        dependency = dependency_from_config(build_config.DEPENDENCY)
        catalog = catalog_from_config(build_config.BUILD_CATALOG)

        logger.info(f"[1/3] Resolving {dependency.describe()}...")
        records, error = select(dependency, flags, catalog, locator=self.locator)
        if error is not None:
            raise error

        logger.info(f"[2/3] Selected {len(records)} of {len(catalog)} build units")
        for record in records:
            logger.debug(f"  {record.name}")

        logger.info(f"[3/3] Handing off {len(records)} units...")
        if handoff is not None:
            for record in records:
                handoff(record)

        logger.info("Configuration complete!")
        return records


def write_manifest(records: List[ActivationRecord], output_path) -> None:
    """Write the activated units as JSON for the downstream build."""
    manifest = {"units": [record.to_dict() for record in records]}
    with open(output_path, "w") as f:
        json.dump(manifest, f, indent=2)
        f.write("\n")
