"""Tests for configuration loading."""

import tomllib
from pathlib import Path

from config import Config, load_config, save_config


class TestLoadConfig:
    """Tests for load_config."""

    def test_creates_default_file(self, tmp_path):
        """Test a missing config file is written with defaults."""
        config_path = tmp_path / "stockpilot.toml"

        config = load_config(config_path)

        assert config_path.exists()
        assert config.db_filename == "stockpilot.db"
        assert config.log_level == "INFO"
        assert config.session_user_email is None

        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        assert data["database"]["filename"] == "stockpilot.db"
        assert data["session"]["user_email"] == ""

    def test_reads_values(self, tmp_path):
        """Test values in the file override the defaults."""
        config_path = tmp_path / "stockpilot.toml"
        config_path.write_text(
            'base_dir = "/srv/stockpilot"\n'
            "[database]\n"
            'filename = "prod.db"\n'
            "[logging]\n"
            'level = "WARNING"\n'
            "[session]\n"
            'user_email = "owner@example.com"\n'
        )

        config = load_config(config_path)

        assert config.base_dir == Path("/srv/stockpilot")
        assert config.db_path == Path("/srv/stockpilot/db/prod.db")
        assert config.log_level == "WARNING"
        assert config.log_dir == Path("/srv/stockpilot/logs")
        assert config.session_user_email == "owner@example.com"

    def test_default_paths(self):
        """Test the default layout under the base directory."""
        config = Config.default()

        assert config.db_path == config.base_dir / "db" / "stockpilot.db"
        assert config.log_dir == config.base_dir / "logs"

    def test_save_config_round_trips_session_user(self, tmp_path):
        """Test a saved session user is read back on the next load."""
        config_path = tmp_path / "stockpilot.toml"
        config = load_config(config_path)
        config.session_user_email = "clerk@example.com"

        save_config(config, config_path)

        assert load_config(config_path).session_user_email == "clerk@example.com"
