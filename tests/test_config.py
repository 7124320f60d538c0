"""
Tests for configuration domain models and the config repository.
"""

import json
import shutil
import tempfile
from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from winrmexec.domain.config import ClientSettings, ExecutionSettings, TransportOptions
from winrmexec.infrastructure.config import CONFIG_NAME, ConfigRepository

SETTINGS = {
    "transport": {
        "host": "10.0.0.5",
        "username": "administrator",
        "password": "P@ssw0rd",
    },
    "execution": {"powershell": False, "max_polls": 100},
}


class TestTransportOptions:
    """Test cases for TransportOptions."""

    def test_defaults(self):
        options = TransportOptions(host="win01", username="admin", password="x")

        assert options.port == 5985
        assert options.path == "/wsman"
        assert options.use_https is False
        assert options.verify_ssl is True
        assert options.timeout_seconds == 60.0
        assert options.url == "http://win01:5985/wsman"
        assert isinstance(options.password, SecretStr)
        assert options.get_password() == "x"

    def test_https_url(self):
        options = TransportOptions(
            host="win01", port=5986, path="custom", username="admin", password="x", use_https=True
        )
        assert options.url == "https://win01:5986/custom"

    def test_host_is_stripped(self):
        assert TransportOptions(host="  win01 ", username="a", password="x").host == "win01"

    def test_empty_host_rejected(self):
        with pytest.raises(ValidationError):
            TransportOptions(host="  ", username="a", password="x")

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_invalid_port(self, port):
        with pytest.raises(ValidationError):
            TransportOptions(host="win01", port=port, username="a", password="x")

    def test_password_hidden_in_repr(self):
        options = TransportOptions(host="win01", username="a", password="hunter2")
        assert "hunter2" not in repr(options)

    @pytest.mark.parametrize(
        "username, expected",
        [
            ("CORP\\admin", True),
            ("admin", False),
            ("\\admin", False),
            ("admin@corp.local", False),
        ],
    )
    def test_domain_account(self, username, expected):
        options = TransportOptions(host="win01", username=username, password="x")
        assert options.is_domain_account() is expected


class TestExecutionSettings:
    """Test cases for ExecutionSettings."""

    def test_defaults(self):
        settings = ExecutionSettings()

        assert settings.fail_on_errors is True
        assert settings.powershell is True
        assert settings.poll_interval_seconds == 0.0
        assert settings.max_polls is None
        assert settings.max_workers == 4

    def test_bounds(self):
        with pytest.raises(ValidationError):
            ExecutionSettings(max_polls=0)
        with pytest.raises(ValidationError):
            ExecutionSettings(poll_interval_seconds=-1)
        with pytest.raises(ValidationError):
            ExecutionSettings(max_workers=0)

    def test_high_poll_interval_warns(self, caplog):
        ExecutionSettings(poll_interval_seconds=30)
        assert "Poll interval" in caplog.text


class TestClientSettings:
    """Test cases for ClientSettings."""

    def test_execution_defaults(self):
        settings = ClientSettings(transport=SETTINGS["transport"])
        assert settings.execution == ExecutionSettings()

    def test_unknown_keys_ignored(self):
        settings = ClientSettings(**SETTINGS, comment="lab hosts")
        assert settings.transport.host == "10.0.0.5"


class TestConfigRepository:
    """Test cases for ConfigRepository."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.repo = ConfigRepository(self.temp_dir)

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_load_json_file_success(self):
        (self.temp_dir / "test.json").write_text(json.dumps({"key": "value"}))
        assert self.repo.load_json_file("test") == {"key": "value"}

    def test_load_jsonc_strips_comments(self):
        content = "// lab host\n{\n  // who\n  \"key\": \"http://value\"\n}\n"
        (self.temp_dir / "test.jsonc").write_text(content)
        assert self.repo.load_json_file("test") == {"key": "http://value"}

    def test_json_preferred_over_jsonc(self):
        (self.temp_dir / "test.json").write_text('{"from": "json"}')
        (self.temp_dir / "test.jsonc").write_text('{"from": "jsonc"}')
        assert self.repo.load_json_file("test") == {"from": "json"}

    def test_load_json_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            self.repo.load_json_file("nonexistent")

    def test_invalid_json(self):
        (self.temp_dir / "test.json").write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            self.repo.load_json_file("test")

    def test_non_object_rejected(self):
        (self.temp_dir / "test.json").write_text("[1, 2]")
        with pytest.raises(ValueError, match="Expected a JSON object"):
            self.repo.load_json_file("test")

    def test_load_settings(self):
        (self.temp_dir / f"{CONFIG_NAME}.json").write_text(json.dumps(SETTINGS))

        settings = self.repo.load_settings()
        assert settings.transport.host == "10.0.0.5"
        assert settings.transport.get_password() == "P@ssw0rd"
        assert settings.execution.powershell is False
        assert settings.execution.max_polls == 100

    def test_load_settings_invalid(self):
        (self.temp_dir / f"{CONFIG_NAME}.json").write_text(json.dumps({"transport": {"host": "x"}}))
        with pytest.raises(ValueError, match="Invalid WinRM configuration"):
            self.repo.load_settings()

    def test_load_path_reads_jsonc_over_json_sibling(self):
        (self.temp_dir / "lab.json").write_text('{"from": "json"}')
        (self.temp_dir / "lab.jsonc").write_text('// lab\n{"from": "jsonc"}\n')
        assert self.repo.load_path(Path("lab.jsonc")) == {"from": "jsonc"}

    def test_load_path_other_suffix_is_plain_json(self):
        (self.temp_dir / "lab.conf").write_text('{"from": "conf"}')
        assert self.repo.load_path(Path("lab.conf")) == {"from": "conf"}

    def test_load_path_not_found(self):
        (self.temp_dir / "lab.json").write_text("{}")
        with pytest.raises(FileNotFoundError):
            self.repo.load_path(Path("lab.conf"))

    def test_load_settings_with_overrides(self):
        (self.temp_dir / f"{CONFIG_NAME}.json").write_text(json.dumps(SETTINGS))

        settings = self.repo.load_settings(
            overrides={"transport": {"host": "win02", "port": None}, "execution": {"max_polls": 5}}
        )
        assert settings.transport.host == "win02"
        assert settings.transport.port == 5985
        assert settings.execution.max_polls == 5
        assert settings.execution.powershell is False

    def test_load_settings_path(self):
        (self.temp_dir / "lab.jsonc").write_text("// lab\n" + json.dumps(SETTINGS))
        settings = self.repo.load_settings_path(Path("lab.jsonc"))
        assert settings.transport.username == "administrator"

    def test_build_settings_rejects_non_object_section(self):
        with pytest.raises(ValueError, match="Expected an object for 'transport'"):
            ConfigRepository.build_settings({"transport": "win01"})

    def test_build_settings_from_overrides_only(self):
        settings = ConfigRepository.build_settings({}, {"transport": SETTINGS["transport"]})
        assert settings.execution == ExecutionSettings()
