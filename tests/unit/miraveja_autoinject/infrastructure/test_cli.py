"""Unit tests for the command line tool."""

import pytest
from typer.testing import CliRunner

from miraveja_autoinject.infrastructure.cli import app

runner = CliRunner()

ORDERS_SOURCE = '''
from autoinject.markers import Injectable, InjectLifetime
from shop.api import IOrderRepository


@Injectable(InjectLifetime.SCOPED)
class OrderService:
    pass


@Injectable(InjectLifetime.SINGLETON, IOrderRepository)
class SqlOrderRepository(IOrderRepository):
    pass
'''


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("NAMESPACE", "ROUTINE_NAME", "SERVICES_PARAMETER", "SOURCE_DIR", "OUTPUT_DIR", "EXCLUDE", "LOG_LEVEL"):
        monkeypatch.delenv(f"AUTOINJECT_{name}", raising=False)


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "src"
    (root / "shop").mkdir(parents=True)
    (root / "shop" / "__init__.py").write_text("")
    (root / "shop" / "api.py").write_text("class IOrderRepository:\n    pass\n")
    (root / "shop" / "orders.py").write_text(ORDERS_SOURCE)
    return root


class TestGenerateCommand:
    """Test cases for the generate command."""

    def test_generate_writes_modules(self, project):
        """Test that generated modules are written next to the sources."""
        result = runner.invoke(app, ["generate", str(project)])

        assert result.exit_code == 0, result.output
        registration = (project / "autoinject" / "registration.py").read_text()
        assert "import shop.orders as _autoinject_m0" in registration
        assert 'services.register(_autoinject_m0.OrderService, lifetime="scoped")' in registration
        assert (project / "autoinject" / "markers.py").exists()
        assert (project / "autoinject" / "__init__.py").exists()

    def test_output_dir_and_namespace(self, project, tmp_path):
        """Test writing into another directory and namespace."""
        (project / "shop" / "orders.py").write_text(ORDERS_SOURCE.replace("autoinject.markers", "shop_di.markers"))
        output = tmp_path / "generated"
        result = runner.invoke(app, ["generate", str(project), "--output-dir", str(output), "--namespace", "shop_di"])

        assert result.exit_code == 0, result.output
        assert (output / "shop_di" / "registration.py").exists()
        assert not (project / "shop_di").exists()

    def test_dry_run(self, project):
        """Test that a dry run prints modules without writing them."""
        result = runner.invoke(app, ["generate", str(project), "--dry-run"])

        assert result.exit_code == 0
        assert "def auto_inject(services):" in result.output
        assert "class InjectLifetime(enum.IntEnum):" in result.output
        assert not (project / "autoinject").exists()

    def test_check(self, project):
        """Test that --check fails until generated files are up to date."""
        stale = runner.invoke(app, ["generate", str(project), "--check"])
        assert stale.exit_code == 1
        assert "Out of date" in stale.output

        runner.invoke(app, ["generate", str(project)])
        fresh = runner.invoke(app, ["generate", str(project), "--check"])
        assert fresh.exit_code == 0, fresh.output
        assert "up to date" in fresh.output

    def test_removed_marker_deletes_registration(self, project):
        """Test that dropping the last marker removes the old registration module."""
        runner.invoke(app, ["generate", str(project)])
        registration = project / "autoinject" / "registration.py"
        assert registration.exists()

        (project / "shop" / "orders.py").write_text("class OrderService:\n    pass\n")
        check = runner.invoke(app, ["generate", str(project), "--check"])
        assert check.exit_code == 1
        assert "Out of date" in check.output
        assert registration.exists()

        result = runner.invoke(app, ["generate", str(project)])
        assert result.exit_code == 0, result.output
        assert "Removed" in result.output
        assert not registration.exists()
        assert (project / "autoinject" / "markers.py").exists()

        fresh = runner.invoke(app, ["generate", str(project), "--check"])
        assert fresh.exit_code == 0, fresh.output

    def test_generation_error_exits_with_one(self, tmp_path):
        """Test that an error diagnostic gives exit code 1 and still writes the marker module."""
        root = tmp_path / "src"
        (root / "my-shop").mkdir(parents=True)
        (root / "my-shop" / "orders.py").write_text(
            "from autoinject.markers import Injectable, InjectLifetime\n"
            "@Injectable(InjectLifetime.SCOPED)\n"
            "class OrderService:\n"
            "    pass\n"
        )

        result = runner.invoke(app, ["generate", str(root)])

        assert result.exit_code == 1
        assert "AUTODI_01" in result.output
        assert (root / "autoinject" / "markers.py").exists()
        assert not (root / "autoinject" / "registration.py").exists()

    def test_parse_error_exits_with_two(self, project):
        """Test that unparseable sources give exit code 2."""
        (project / "shop" / "broken.py").write_text("class :\n")
        result = runner.invoke(app, ["generate", str(project)])
        assert result.exit_code == 2
        assert "broken.py" in result.output

    def test_missing_directory_exits_with_two(self, tmp_path):
        """Test that a missing source directory gives exit code 2."""
        result = runner.invoke(app, ["generate", str(tmp_path / "missing")])
        assert result.exit_code == 2

    def test_invalid_namespace_exits_with_two(self, project):
        """Test that an invalid namespace is rejected."""
        result = runner.invoke(app, ["generate", str(project), "--namespace", "my-di"])
        assert result.exit_code == 2
        assert "Invalid generator options" in result.output

    def test_source_dir_from_environment(self, project, monkeypatch):
        """Test that AUTOINJECT_SOURCE_DIR is used without an argument."""
        monkeypatch.setenv("AUTOINJECT_SOURCE_DIR", str(project))
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 0, result.output
        assert (project / "autoinject" / "registration.py").exists()


class TestInspectCommand:
    """Test cases for the inspect command."""

    def test_lists_registrations(self, project):
        """Test that planned registrations are listed."""
        result = runner.invoke(app, ["inspect", str(project)])

        assert result.exit_code == 0, result.output
        assert "shop.orders.OrderService (scoped)" in result.output
        assert "shop.orders.SqlOrderRepository (singleton) as shop.api.IOrderRepository" in result.output

    def test_no_marked_classes(self, tmp_path):
        """Test output for a project without marked classes."""
        (tmp_path / "plain.py").write_text("class Plain: ...\n")
        result = runner.invoke(app, ["inspect", str(tmp_path)])
        assert result.exit_code == 0
        assert "No classes marked with Injectable." in result.output
