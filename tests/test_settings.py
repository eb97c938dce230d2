import sys
import pathlib
sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from modelbuilder.settings import get_settings, Settings


def test_default_settings():
    get_settings.cache_clear()  # type: ignore[attr-defined]
    settings = get_settings()
    assert settings.key_attribute == "id"
    assert settings.default_auto_increment is True
    assert settings.guard_continuation is False


def test_env_override(monkeypatch):
    monkeypatch.setenv("MODELBUILDER_KEY_ATTRIBUTE", "pk")
    monkeypatch.setenv("MODELBUILDER_DEFAULT_AUTO_INCREMENT", "false")
    monkeypatch.setenv("MODELBUILDER_GUARD_CONTINUATION", "true")
    # Ensure cached instance is cleared
    get_settings.cache_clear()  # type: ignore[attr-defined]

    settings = get_settings()
    assert settings.key_attribute == "pk"
    assert settings.default_auto_increment is False
    assert settings.guard_continuation is True

    # Clean
    get_settings.cache_clear()  # type: ignore[attr-defined]


def test_explicit_settings_bypass_environment(monkeypatch):
    monkeypatch.setenv("MODELBUILDER_GUARD_CONTINUATION", "true")
    assert Settings(guard_continuation=False).guard_continuation is False
