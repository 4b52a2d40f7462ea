import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "python"))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from the caller's package search environment."""
    import env_manager
    for name in ("CMAKE_PREFIX_PATH", "Legion_DIR", "Legion_USE_HDF5",
                 "Legion_USE_Python", "Legion_NETWORKS"):
        monkeypatch.delenv(name, raising=False)
    env_manager.clear()
    yield
    env_manager.clear()


@pytest.fixture
def legion_prefix(tmp_path):
    """An install prefix with lib/cmake/Legion config files."""
    config_dir = tmp_path / "lib" / "cmake" / "Legion"
    config_dir.mkdir(parents=True)
    (config_dir / "LegionConfig.cmake").write_text(
        'set(Legion_USE_CUDA OFF)\n'
        'set(CXX_BUILD_WARNING_FLAGS "-Wall;-Wextra;-Werror")\n'
    )
    (config_dir / "LegionConfigVersion.cmake").write_text(
        'set(PACKAGE_VERSION "23.03.0")\n'
    )
    return tmp_path
