"""Tests for SuiteConfigurator and the shipped test-suite catalog."""

import json
import logging
from unittest.mock import MagicMock

import pytest

from build_unit import BuildUnit
from catalog import catalog_from_config, dependency_from_config
from dependency import DependencyUnresolved, InTreeLocator, PackageLocator
from suite_configurator import SuiteConfigurator, write_manifest

UNCONDITIONAL = [
    "attach_file_mini",
    "legion_stl",
    "rendering",
    "realm",
    "gather_perf",
    "performance/realm/event_latency",
    "performance/realm/task_throughput",
]


@pytest.fixture
def configurator(legion_prefix):
    return SuiteConfigurator(locator=PackageLocator(prefixes=[str(legion_prefix)]))


class TestCatalogFromConfig:

    def test_preserves_order(self):
        units = catalog_from_config([{"name": "b"}, {"name": "a", "requires": ["f"]}])
        assert units == (BuildUnit("b"), BuildUnit("a", ("f",)))

    def test_duplicate_name(self):
        with pytest.raises(ValueError, match="Duplicate"):
            catalog_from_config([{"name": "a"}, {"name": "a"}])

    def test_missing_name(self):
        with pytest.raises(ValueError, match="has no name"):
            catalog_from_config([{"requires": []}])

    def test_requires_must_be_list(self):
        with pytest.raises(ValueError, match="requires must be a list"):
            catalog_from_config([{"name": "a", "requires": "hdf5Enabled"}])

    def test_dependency_defaults(self):
        dependency = dependency_from_config({"name": "Legion"})
        assert dependency.required is True
        assert dependency.min_version is None


class TestDiscovery:

    def test_lists_test_suite(self):
        assert "test" in SuiteConfigurator().list_suites()

    def test_shipped_catalog(self):
        configurator = SuiteConfigurator()
        catalog = configurator.get_catalog("test")
        assert [u.name for u in catalog[:7]] == UNCONDITIONAL
        assert catalog[7] == BuildUnit("hdf_attach_subregion_parallel", ("hdf5Enabled",))
        assert catalog[8] == BuildUnit("python_bindings", ("scriptingBindingsEnabled",))
        assert catalog[9] == BuildUnit("bug954", ("multiNodeNetworkingEnabled",))
        assert configurator.get_dependency("test").name == "Legion"

    def test_unknown_suite(self):
        with pytest.raises(ValueError, match="Suite 'nope' not found"):
            SuiteConfigurator().configure("nope", {})

    def test_custom_suites_dir(self, tmp_path):
        suite = tmp_path / "mini"
        suite.mkdir()
        (suite / "build_config.py").write_text(
            'DEPENDENCY = {"name": "Legion"}\n'
            'BUILD_CATALOG = [{"name": "only"}]\n'
        )
        (tmp_path / "not_a_suite").mkdir()
        configurator = SuiteConfigurator(suites_dir=tmp_path)
        assert configurator.list_suites() == ["mini"]


class TestConfigure:

    def test_no_flags(self, configurator):
        records = configurator.configure("test", {})
        assert [r.name for r in records] == UNCONDITIONAL

    def test_hdf5_and_networks(self, configurator):
        records = configurator.configure(
            "test", {"hdf5Enabled": True, "multiNodeNetworkingEnabled": True})
        assert [r.name for r in records] == UNCONDITIONAL + [
            "hdf_attach_subregion_parallel", "bug954"]
        assert records[0].compile_options == ("-Wall", "-Wextra", "-Werror")

    def test_step_logging(self, configurator, caplog):
        with caplog.at_level(logging.INFO, logger="suite_configurator"):
            configurator.configure("test", {"hdf5Enabled": True})
        messages = [r.getMessage() for r in caplog.records if r.name == "suite_configurator"]
        assert messages[0] == "[1/3] Resolving Legion..."
        assert messages[1] == "[2/3] Selected 8 of 10 build units"
        assert messages[2] == "[3/3] Handing off 8 units..."

    def test_handoff_in_order_after_selection(self, configurator):
        handoff = MagicMock()
        records = configurator.configure("test", {"scriptingBindingsEnabled": True}, handoff=handoff)
        assert [c.args[0] for c in handoff.call_args_list] == records
        assert records[-1].name == "python_bindings"

    def test_unresolved_raises_without_handoff(self, tmp_path):
        configurator = SuiteConfigurator(locator=PackageLocator(prefixes=[str(tmp_path)]))
        handoff = MagicMock()
        with pytest.raises(DependencyUnresolved, match="Legion"):
            configurator.configure("test", {"hdf5Enabled": True}, handoff=handoff)
        handoff.assert_not_called()

    def test_in_tree(self, tmp_path):
        configurator = SuiteConfigurator(locator=InTreeLocator(str(tmp_path), ["-Wall"]))
        records = configurator.configure("test", {})
        assert all(r.compile_options == ("-Wall",) for r in records)


def test_write_manifest(tmp_path, configurator):
    records = configurator.configure("test", {"hdf5Enabled": True})
    output = tmp_path / "units.json"
    write_manifest(records, output)

    manifest = json.loads(output.read_text())
    assert [u["name"] for u in manifest["units"]] == UNCONDITIONAL + ["hdf_attach_subregion_parallel"]
    assert manifest["units"][-1]["requires"] == ["hdf5Enabled"]
    assert manifest["units"][0]["compile_options"] == ["-Wall", "-Wextra", "-Werror"]
