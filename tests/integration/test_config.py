import pytest

from core.config import ConfigManager
from core.exceptions import ConfigurationError

CONFIG_KEYS = [
    "RELAY_BASE_URL", "RELAY_TIMEOUT", "POLL_GENERATOR", "OPENAI_API_KEY", "OPENAI_MODEL",
    "MIN_DESCRIPTION_LENGTH", "REQUIRE_IMAGE", "TRANSITION_SETTLE_MS", "RESET_GRACE_MINUTES",
    "CACHE_PATH", "FALLBACK_IMAGE", "LOG_LEVEL", "VERBOSE_LOGGING",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in CONFIG_KEYS:
        # setenv first so values loaded from a .env file are undone too
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


def build(env_file: str = "missing.env"):
    return ConfigManager(env_file_path=env_file).get_config()


def test_defaults(clean_env):
    """Test configuration defaults."""
    config = build()

    assert config.relay.base_url == "http://localhost:3001/api"
    assert config.relay.proxy_image_endpoint == "http://localhost:3001/api/proxy-image"
    assert config.integrations.poll_generator == "relay"
    assert config.app.min_description_length == 20
    assert config.app.require_image is True
    assert config.app.settle_delay_seconds == 0.3
    assert config.app.reset_grace_minutes == 5
    assert not config.uses_openai_generator()


def test_environment_overrides(clean_env):
    """Test that environment variables are parsed and normalized."""
    clean_env.setenv("RELAY_BASE_URL", "https://relay.example.com/api/")
    clean_env.setenv("POLL_GENERATOR", "OpenAI")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("REQUIRE_IMAGE", "no")
    clean_env.setenv("TRANSITION_SETTLE_MS", "0")
    clean_env.setenv("LOG_LEVEL", "debug")

    config = build()

    assert config.relay.base_url == "https://relay.example.com/api"
    assert config.uses_openai_generator()
    assert config.has_openai()
    assert config.app.require_image is False
    assert config.app.settle_delay_seconds == 0
    assert config.app.log_level == "DEBUG"


@pytest.mark.parametrize("key, value, reported_key", [
    ("RELAY_BASE_URL", "relay.example.com", "RELAY_BASE_URL"),
    ("RELAY_TIMEOUT", "soon", "RELAY_TIMEOUT"),
    ("POLL_GENERATOR", "carrier-pigeon", "POLL_GENERATOR"),
    ("POLL_GENERATOR", "openai", "OPENAI_API_KEY"),
    ("RESET_GRACE_MINUTES", "90", "RESET_GRACE_MINUTES"),
    ("TRANSITION_SETTLE_MS", "-1", "TRANSITION_SETTLE_MS"),
    ("LOG_LEVEL", "LOUD", "LOG_LEVEL"),
])
def test_invalid_values_raise(clean_env, key, value, reported_key):
    """Test validation errors name the offending key."""
    clean_env.setenv(key, value)

    with pytest.raises(ConfigurationError) as exc_info:
        build()

    assert exc_info.value.context["config_key"] == reported_key


def test_env_file_does_not_override_environment(clean_env, tmp_path):
    """Test .env loading precedence."""
    env_file = tmp_path / "test.env"
    env_file.write_text('# comment\nCACHE_PATH="/tmp/from-file.json"\nFALLBACK_IMAGE=file.svg\nbroken line\n', encoding="utf-8")
    clean_env.setenv("FALLBACK_IMAGE", "env.svg")

    manager = ConfigManager(env_file_path="missing.env")
    manager._load_env_file(env_file)
    config = manager.get_config(force_reload=True)

    assert config.app.cache_path == "/tmp/from-file.json"
    assert config.app.fallback_image == "env.svg"
