"""Tests for environment-driven settings."""

import pytest

from users_api.config import Settings


class TestSettingsFromEnv:
    """Test Settings.from_env."""

    def test_defaults(self, clean_env):
        settings = Settings.from_env()

        assert settings.host == "localhost"
        assert settings.port == 4000
        assert settings.users_file == "data/users.json"
        assert settings.static_dir == "public"
        assert settings.id_strategy == "length"
        assert settings.write_error_status == 500
        assert settings.create_file is True
        assert settings.log_level == "INFO"

    def test_plain_host_and_port(self, clean_env, monkeypatch):
        monkeypatch.setenv("HOST", "0.0.0.0")
        monkeypatch.setenv("PORT", "8080")

        settings = Settings.from_env()

        assert settings.host == "0.0.0.0"
        assert settings.port == 8080

    def test_prefixed_variables_win(self, clean_env, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("USERS_API_PORT", "9090")
        monkeypatch.setenv("HOST", "ignored")
        monkeypatch.setenv("USERS_API_HOST", "127.0.0.1")

        settings = Settings.from_env()

        assert settings.port == 9090
        assert settings.host == "127.0.0.1"

    def test_non_numeric_port_falls_back(self, clean_env, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-port")

        assert Settings.from_env().port == 4000

    def test_store_options(self, clean_env, monkeypatch):
        monkeypatch.setenv("USERS_API_USERS_FILE", "/tmp/people.json")
        monkeypatch.setenv("USERS_API_ID_STRATEGY", "MAX")
        monkeypatch.setenv("USERS_API_WRITE_ERROR_STATUS", "401")
        monkeypatch.setenv("USERS_API_CREATE_FILE", "no")
        monkeypatch.setenv("USERS_API_LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.users_file == "/tmp/people.json"
        assert settings.id_strategy == "max"
        assert settings.write_error_status == 401
        assert settings.create_file is False
        assert settings.log_level == "DEBUG"

    def test_unknown_id_strategy(self, clean_env, monkeypatch):
        monkeypatch.setenv("USERS_API_ID_STRATEGY", "uuid")

        with pytest.raises(ValueError, match="Unknown id strategy"):
            Settings.from_env()

    def test_dotenv_file(self, clean_env, monkeypatch, tmp_path):
        """Test that a .env file is read and real environment variables win."""
        (tmp_path / ".env").write_text("PORT=5050\nUSERS_API_USERS_FILE=from-dotenv.json\n")
        monkeypatch.setenv("USERS_API_USERS_FILE", "from-env.json")

        settings = Settings.from_env()

        assert settings.port == 5050
        assert settings.users_file == "from-env.json"
