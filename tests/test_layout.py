"""
Export layout tests

Tests exported typings/manifest locations for scoped and unscoped packages,
self-install and overrides, and the node_modules run check.
"""

import pytest
from pathlib import Path

from ts_pkg_installer.lib.layout import (
    exportedManifestPath_resolve,
    exportedTypingsDir_resolve,
    exportLocation_resolve,
    install_shouldRun,
    manifestTypingsPath_compute,
    package_isScoped,
)
from ts_pkg_installer.models import InstallerConfig, PackageConfig


class TestScope:
    """Test scoped package detection"""

    def test_unscoped(self):
        assert package_isScoped("foo") is False

    def test_scoped(self):
        assert package_isScoped("@scope/foo") is True


class TestExportedTypingsDir:
    """Test the exported typings directory policy"""

    def test_unscoped_dependency(self):
        """Unscoped dependency climbs out of node_modules/foo"""
        assert exportedTypingsDir_resolve(scoped=False, selfInstall=False) == "../../typings"

    def test_scoped_dependency(self):
        """Scoped dependency needs one extra level for the @scope segment"""
        assert exportedTypingsDir_resolve(scoped=True, selfInstall=False) == "../../../typings"

    def test_self_install(self):
        """Self-install writes into the package's own typings"""
        assert exportedTypingsDir_resolve(scoped=False, selfInstall=True) == "typings"
        assert exportedTypingsDir_resolve(scoped=True, selfInstall=True) == "typings"

    def test_override_wins(self):
        """Configured directory is used as-is"""
        assert exportedTypingsDir_resolve(True, False, override="custom/typings") == "custom/typings"
        assert exportedTypingsDir_resolve(False, True, override="custom/typings") == "custom/typings"


class TestExportedManifestPath:
    """Test the exported TSD manifest policy"""

    def test_unscoped_dependency(self):
        assert exportedManifestPath_resolve(scoped=False, selfInstall=False) == "../tsd.json"

    def test_scoped_dependency(self):
        assert exportedManifestPath_resolve(scoped=True, selfInstall=False) == "../../tsd.json"

    def test_self_install(self):
        assert exportedManifestPath_resolve(scoped=True, selfInstall=True) == "typings/tsd.json"

    def test_override_wins(self):
        assert exportedManifestPath_resolve(False, False, override="x/tsd.json") == "x/tsd.json"


class TestExportLocation:
    """Test full export location resolution"""

    def test_unscoped(self):
        package = PackageConfig(name="foo")
        config = InstallerConfig(typings_subdir="foo")
        location = exportLocation_resolve(package, config, selfInstall=False)

        assert location.typings_dir == "../../typings"
        assert location.typings_subdir == "../../typings/foo"
        assert location.manifest_path == "../tsd.json"

    def test_scoped(self):
        package = PackageConfig(name="@scope/foo")
        config = InstallerConfig(typings_subdir="@scope/foo")
        location = exportLocation_resolve(package, config, selfInstall=False)

        assert location.typings_dir == "../../../typings"
        assert location.typings_subdir == "../../../typings/@scope/foo"
        assert location.manifest_path == "../../tsd.json"

    def test_custom_typings_subdir(self):
        package = PackageConfig(name="foo")
        config = InstallerConfig(typings_subdir="bar")
        location = exportLocation_resolve(package, config, selfInstall=True)

        assert location.typings_subdir == "typings/bar"

    def test_unresolved_typings_subdir_rejected(self):
        """typings_subdir must be resolved before the location is computed"""
        with pytest.raises(ValueError):
            exportLocation_resolve(PackageConfig(name="foo"), InstallerConfig(), selfInstall=False)


class TestManifestTypingsPath:
    """Test the manifest 'path' field computation"""

    package_dir = Path("/work/app/node_modules/foo")

    def test_unscoped(self):
        location = exportLocation_resolve(
            PackageConfig(name="foo"), InstallerConfig(typings_subdir="foo"), selfInstall=False
        )
        assert manifestTypingsPath_compute(location, self.package_dir) == "../typings"

    def test_scoped(self):
        location = exportLocation_resolve(
            PackageConfig(name="@scope/foo"), InstallerConfig(typings_subdir="@scope/foo"), selfInstall=False
        )
        package_dir = Path("/work/app/node_modules/@scope/foo")
        assert manifestTypingsPath_compute(location, package_dir) == "../typings"

    def test_self_install(self):
        location = exportLocation_resolve(
            PackageConfig(name="foo"), InstallerConfig(typings_subdir="foo"), selfInstall=True
        )
        assert manifestTypingsPath_compute(location, Path("/work/foo")) == "."


class TestShouldRun:
    """Test the node_modules run check"""

    def test_inside_node_modules(self, tmp_path):
        package_dir = tmp_path / "node_modules" / "foo"
        package_dir.mkdir(parents=True)
        assert install_shouldRun(package_dir) is True

    def test_inside_scope(self, tmp_path):
        package_dir = tmp_path / "node_modules" / "@scope" / "foo"
        package_dir.mkdir(parents=True)
        assert install_shouldRun(package_dir) is True

    def test_scope_outside_node_modules(self, tmp_path):
        package_dir = tmp_path / "packages" / "@scope" / "foo"
        package_dir.mkdir(parents=True)
        assert install_shouldRun(package_dir) is False

    def test_own_checkout(self, tmp_path):
        package_dir = tmp_path / "foo"
        package_dir.mkdir()
        assert install_shouldRun(package_dir) is False

    def test_self_install_and_force(self, tmp_path):
        assert install_shouldRun(tmp_path, selfInstall=True) is True
        assert install_shouldRun(tmp_path, force=True) is True


class TestInstallerConfigDefaults:
    """File and directory defaults follow the application settings"""

    def test_defaults_from_settings(self):
        from ts_pkg_installer.config import appsettings

        config = InstallerConfig()
        assert config.package_config == appsettings.package_config
        assert config.local_typings_dir == appsettings.typings_dir
        assert config.local_tsd_config == appsettings.manifest_file

    def test_local_and_exported_typings_share_name(self):
        location = exportLocation_resolve(
            PackageConfig(name="foo"), InstallerConfig(typingsSubdir="foo"), selfInstall=True
        )
        assert location.typings_dir == InstallerConfig().local_typings_dir
