"""
test_config.py
--------------
Unit tests for Settings loading from YAML and the environment.
"""
import pytest
from pathlib import Path
from pydantic import ValidationError as PydanticValidationError

from mementos.core.config import Settings
from mementos.core.exceptions import ValidationError


class TestSettingsDefaults:

    def test_defaults_are_valid(self):
        settings = Settings()
        assert settings.strict_place_lock is True
        assert settings.default_quota_limit == 100
        assert settings.payments_enabled is False

    def test_trailing_slash_stripped(self):
        settings = Settings(public_base_url="http://example.com/")
        assert settings.public_base_url == "http://example.com"

    def test_invalid_values_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(max_upload_bytes=0)
        with pytest.raises(PydanticValidationError):
            Settings(default_quota_limit=-1)

    def test_home_expanded(self):
        settings = Settings(log_dir="~/mementos-logs")
        assert settings.log_dir == Path("~/mementos-logs").expanduser()


class TestSettingsLoad:

    def test_yaml_file_applied(self, tmp_dir):
        config = tmp_dir / "config.yaml"
        config.write_text(
            "database_url: sqlite:///x.db\n"
            "strict_place_lock: false\n"
            "allowed_origins:\n  - http://a.test\n  - http://b.test\n"
        )

        settings = Settings.load(config)

        assert settings.database_url == "sqlite:///x.db"
        assert settings.strict_place_lock is False
        assert settings.allowed_origins == ["http://a.test", "http://b.test"]

    def test_environment_overrides_yaml(self, tmp_dir, monkeypatch):
        config = tmp_dir / "config.yaml"
        config.write_text("default_quota_limit: 5\n")
        monkeypatch.setenv("MEMENTOS_DEFAULT_QUOTA_LIMIT", "50")
        monkeypatch.setenv("MEMENTOS_ALLOWED_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("MEMENTOS_LOG_DIR", str(tmp_dir / "logs"))

        settings = Settings.load(config)

        assert settings.default_quota_limit == 50
        assert settings.allowed_origins == ["http://a.test", "http://b.test"]
        assert settings.log_dir == Path(tmp_dir / "logs")

    def test_overrides_win(self, tmp_dir, monkeypatch):
        config = tmp_dir / "config.yaml"
        config.write_text("database_url: sqlite:///yaml.db\n")
        monkeypatch.setenv("MEMENTOS_DATABASE_URL", "sqlite:///env.db")

        settings = Settings.load(config, database_url="sqlite:///flag.db")

        assert settings.database_url == "sqlite:///flag.db"

    def test_config_path_from_environment(self, tmp_dir, monkeypatch):
        config = tmp_dir / "other.yaml"
        config.write_text("app_url: http://app.test\n")
        monkeypatch.setenv("MEMENTOS_CONFIG", str(config))

        settings = Settings.load()

        assert settings.app_url == "http://app.test"

    def test_file_only_read_by_load(self, tmp_dir, monkeypatch):
        config = tmp_dir / "other.yaml"
        config.write_text("app_url: http://app.test\n")
        monkeypatch.setenv("MEMENTOS_CONFIG", str(config))

        Settings.load()

        assert Settings().app_url == "http://localhost:3000"

    def test_unknown_key_rejected(self, tmp_dir):
        config = tmp_dir / "config.yaml"
        config.write_text("databse_url: typo\n")

        with pytest.raises(ValidationError, match="databse_url"):
            Settings.load(config)

    def test_null_directory_rejected(self, tmp_dir):
        config = tmp_dir / "config.yaml"
        config.write_text("log_dir:\n")

        with pytest.raises(ValidationError, match="log_dir"):
            Settings.load(config)

    def test_null_optional_secret_allowed(self, tmp_dir):
        config = tmp_dir / "config.yaml"
        config.write_text("stripe_secret_key:\n")

        assert Settings.load(config).stripe_secret_key is None

    def test_non_mapping_rejected(self, tmp_dir):
        config = tmp_dir / "config.yaml"
        config.write_text("- just\n- a list\n")

        with pytest.raises(ValidationError, match="mapping"):
            Settings.load(config)

    def test_invalid_yaml_rejected(self, tmp_dir):
        config = tmp_dir / "config.yaml"
        config.write_text("database_url: [unclosed\n")

        with pytest.raises(ValidationError, match="Invalid YAML"):
            Settings.load(config)

    def test_bad_boolean_rejected(self, monkeypatch):
        monkeypatch.setenv("MEMENTOS_CONFIG", "/nonexistent/config.yaml")
        monkeypatch.setenv("MEMENTOS_STRICT_PLACE_LOCK", "maybe")

        with pytest.raises(ValidationError, match="strict_place_lock"):
            Settings.load()

    def test_bad_value_from_load_is_project_error(self):
        with pytest.raises(ValidationError, match="max_upload_bytes"):
            Settings.load(max_upload_bytes=0)

    def test_missing_explicit_file_raises(self, tmp_dir):
        with pytest.raises(ValidationError, match="not found"):
            Settings.load(tmp_dir / "missing.yaml")

    def test_payments_enabled_needs_key_and_price(self):
        assert Settings(stripe_secret_key="sk_test", stripe_price_id="price_1").payments_enabled
        assert not Settings(stripe_secret_key="sk_test").payments_enabled
