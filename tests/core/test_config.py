"""Tests for configuration parsing."""

import tomllib

from guitar_looper.core.config import (
    Config,
    create_default_config,
    get_config_dir,
    get_data_dir,
    load_config,
    parse_config,
)


class TestParseConfig:
    """Tests for parse_config."""

    def test_empty_toml_gives_defaults(self) -> None:
        assert parse_config({}) == Config()

    def test_default_template_matches_defaults(self) -> None:
        """The generated config.toml parses back to the built-in defaults."""
        assert parse_config(tomllib.loads(create_default_config())) == Config()

    def test_overrides(self) -> None:
        config = parse_config(
            {
                "player": {"poll_interval": 0.1, "fullscreen": True},
                "chapters": {"ffprobe_path": "/opt/ffprobe", "min_duration": 30},
                "history": {"max_entries": 5},
                "ui": {"seek_step": 2},
                "logging": {"level": "DEBUG"},
            }
        )
        assert config.player.poll_interval == 0.1
        assert config.player.fullscreen is True
        assert config.player.volume == 70
        assert config.chapters.ffprobe_path == "/opt/ffprobe"
        assert config.chapters.min_duration == 30.0
        assert config.chapters.auto_detect is True
        assert config.history.max_entries == 5
        assert config.ui.seek_step == 2.0
        assert config.logging.level == "DEBUG"

    def test_log_file_expands_home(self) -> None:
        config = parse_config({"logging": {"log_file": "~/looper.log"}})
        assert not config.logging.log_file.startswith("~")


class TestDirectories:
    """Tests for XDG directory resolution."""

    def test_xdg_config_home(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / "guitar-looper"

    def test_xdg_data_home(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        assert get_data_dir() == tmp_path / "guitar-looper"


class TestLoadConfig:
    """Tests for load_config."""

    def test_creates_default_file(self, monkeypatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
        monkeypatch.delenv("GUITAR_LOOPER_FFPROBE", raising=False)
        monkeypatch.delenv("GUITAR_LOOPER_MPV_SOCKET", raising=False)

        config = load_config()

        assert config == Config()
        assert (tmp_path / "cfg" / "guitar-looper" / "config.toml").exists()

    def test_reads_local_file_and_env_overrides(self, monkeypatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
        (tmp_path / "config.toml").write_text("[history]\nmax_entries = 3\n")
        monkeypatch.setenv("GUITAR_LOOPER_FFPROBE", "/usr/local/bin/ffprobe")
        monkeypatch.delenv("GUITAR_LOOPER_MPV_SOCKET", raising=False)

        config = load_config()

        assert config.history.max_entries == 3
        assert config.chapters.ffprobe_path == "/usr/local/bin/ffprobe"

    def test_invalid_toml_falls_back(self, monkeypatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
        monkeypatch.delenv("GUITAR_LOOPER_FFPROBE", raising=False)
        monkeypatch.delenv("GUITAR_LOOPER_MPV_SOCKET", raising=False)
        (tmp_path / "config.toml").write_text("[history\n")

        assert load_config() == Config()
