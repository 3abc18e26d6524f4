"""
Root conftest — isolate provider/search environment variables so Settings
tests are not affected by real keys in the developer's or CI environment.
"""
import pytest

_ENV_VARS = [
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "GROQ_API_KEY",
    "SEARCH_API_KEY",
    "CX_ENGINE",
    "PROVIDER_TYPE",
    "AXONERAI_CONFIG",
]


@pytest.fixture(autouse=True)
def _clear_api_keys_from_env(monkeypatch):
    """Remove key env vars for every test so Settings() behaves as if none
    are present unless the test provides them. Also disables .env loading so
    a local .env does not leak real credentials into tests."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    import config.settings as settings_module
    from pydantic_settings import SettingsConfigDict
    patched_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )
    monkeypatch.setattr(settings_module.Settings, "model_config", patched_config)
