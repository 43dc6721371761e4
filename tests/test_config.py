"""Tests for environment-driven settings."""

from pipeshell.config import env_int


class TestEnvInt:
    """Test integer settings read from the environment."""

    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("PIPESHELL_CHUNK_SIZE", raising=False)
        assert env_int("PIPESHELL_CHUNK_SIZE", 65536, minimum=1) == 65536

    def test_value_read(self, monkeypatch):
        monkeypatch.setenv("PIPESHELL_CHUNK_SIZE", "4096")
        assert env_int("PIPESHELL_CHUNK_SIZE", 65536, minimum=1) == 4096

    def test_clamped_to_minimum(self, monkeypatch):
        """A zero chunk size would make every read look like end of input."""
        monkeypatch.setenv("PIPESHELL_CHUNK_SIZE", "0")
        assert env_int("PIPESHELL_CHUNK_SIZE", 65536, minimum=1) == 1
        monkeypatch.setenv("PIPESHELL_CHUNK_SIZE", "-8")
        assert env_int("PIPESHELL_CHUNK_SIZE", 65536, minimum=1) == 1

    def test_non_numeric_falls_back(self, monkeypatch, capsys):
        monkeypatch.setenv("PIPESHELL_CHUNK_SIZE", "big")
        assert env_int("PIPESHELL_CHUNK_SIZE", 65536, minimum=1) == 65536
        assert "ignoring PIPESHELL_CHUNK_SIZE='big'" in capsys.readouterr().err
