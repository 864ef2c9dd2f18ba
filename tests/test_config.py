"""Tests de configuración por entorno."""

import os

from oee_engine.conventions import EdgeCaseConventions, IdleFill
from common.config import get_settings


class TestSettings:
    """Settings del proceso desde variables de entorno."""

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OEE_ENV_FILE", str(tmp_path / "missing.env"))
        for name in ("OEE_DATABASE_URL", "OEE_UPDATE_INTERVAL_MS", "OEE_CONFIG_REFRESH_TICKS"):
            monkeypatch.delenv(name, raising=False)

        settings = get_settings()
        assert settings.database_url == "sqlite:///oee_tags.db"
        assert settings.update_interval_ms == 1000
        assert settings.config_refresh_ticks == 30

    def test_env_file_does_not_override_real_env(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("OEE_DATABASE_URL=sqlite:///from_file.db\nOEE_UPDATE_INTERVAL_MS=500\n")
        monkeypatch.setenv("OEE_ENV_FILE", str(env_file))
        monkeypatch.setenv("OEE_DATABASE_URL", "sqlite:///from_env.db")
        monkeypatch.delenv("OEE_UPDATE_INTERVAL_MS", raising=False)

        settings = get_settings()
        assert settings.database_url == "sqlite:///from_env.db"
        assert settings.update_interval_ms == 500
        # load_dotenv escribe en os.environ fuera de monkeypatch
        os.environ.pop("OEE_UPDATE_INTERVAL_MS", None)


class TestConventionsFromEnv:
    """Convenciones de casos borde configurables."""

    def test_choices(self, monkeypatch):
        monkeypatch.setenv("OEE_IDLE_PERFORMANCE", "FULL")
        monkeypatch.setenv("OEE_UNPLANNED_AVAILABILITY", "bogus")
        monkeypatch.setenv("OEE_MAX_SHIFTS", "0")

        conv = EdgeCaseConventions.from_env()
        assert conv.idle_performance is IdleFill.FULL
        assert conv.unplanned_availability is IdleFill.ZERO
        assert conv.shift_limit is None

    def test_defaults(self, monkeypatch):
        for name in ("OEE_IDLE_PERFORMANCE", "OEE_UNPLANNED_AVAILABILITY", "OEE_MAX_SHIFTS",
                     "OEE_SHIFT_IMMINENT_WINDOW_S", "OEE_WRITE_COOLDOWN_S"):
            monkeypatch.delenv(name, raising=False)
        assert EdgeCaseConventions.from_env() == EdgeCaseConventions()
