#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration,
including environment variables, defaults, and validation.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict
from pathlib import Path

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

POLL_GENERATORS = ('relay', 'openai')


@dataclass
class RelayConfig:
    """News/poll relay connection configuration."""
    base_url: str = "http://localhost:3001/api"
    timeout: int = 10
    user_agent: str = "Mozilla/5.0 (compatible; Pollfeed/1.0)"

    @property
    def proxy_image_endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/proxy-image"


@dataclass
class IntegrationConfig:
    """External integration configuration."""
    poll_generator: str = "relay"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_timeout: int = 20


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    # Article filter policy
    min_description_length: int = 20
    require_image: bool = True

    # Feed behaviour
    transition_settle_ms: int = 300
    reset_grace_minutes: int = 5

    # Persistence
    cache_path: str = ".pollfeed_cache.json"
    fallback_image: str = "fallback.svg"

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False

    @property
    def settle_delay_seconds(self) -> float:
        return self.transition_settle_ms / 1000.0


@dataclass
class Config:
    """Master configuration container."""
    relay: RelayConfig
    integrations: IntegrationConfig
    app: ApplicationConfig

    # Environment info
    environment: str = field(default_factory=lambda: os.getenv('ENVIRONMENT', 'development'))

    def has_openai(self) -> bool:
        """Check if OpenAI integration is available."""
        return bool(self.integrations.openai_api_key)

    def uses_openai_generator(self) -> bool:
        return self.integrations.poll_generator == 'openai'


def _env_bool(key: str, default: str) -> bool:
    return os.getenv(key, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(key: str, default: str) -> int:
    raw = os.getenv(key, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(key, f"expected an integer, got {raw!r}")


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
        """
        self._config: Optional[Config] = None
        self._env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self) -> None:
        """Load environment variables from .env file."""
        # Find project root (where .env should be)
        current_dir = Path(__file__).parent
        project_root = current_dir.parent.parent  # Go up to project root
        env_path = project_root / self._env_file_path

        if env_path.exists():
            self._load_env_file(env_path)
        else:
            logger.debug(f"No .env file found at {env_path}")

    def _load_env_file(self, env_path: Path) -> None:
        """Load variables from .env file."""
        try:
            with open(env_path, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except OSError as e:
            logger.error(f"Error loading .env file {env_path}: {e}")
            return

        loaded_count = 0
        for line_num, line in enumerate(lines, 1):
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith('#'):
                continue

            # Parse KEY=VALUE format
            if '=' not in line:
                logger.warning(f"Invalid .env format at line {line_num}: {line}")
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()

            # Remove quotes if present
            if value.startswith('"') and value.endswith('"'):
                value = value[1:-1]
            elif value.startswith("'") and value.endswith("'"):
                value = value[1:-1]

            # Only set if not already in environment (env vars take precedence)
            if key not in os.environ:
                os.environ[key] = value
                loaded_count += 1
                logger.debug(f"Loaded {key} from .env")
            else:
                logger.debug(f"Skipped {key} (already in environment)")

        logger.info(f"Loaded {loaded_count} variables from {env_path}")

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Complete configuration object
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""

        relay_config = RelayConfig(
            base_url=os.getenv('RELAY_BASE_URL', 'http://localhost:3001/api').rstrip('/'),
            timeout=_env_int('RELAY_TIMEOUT', '10'),
            user_agent=os.getenv('RELAY_USER_AGENT', 'Mozilla/5.0 (compatible; Pollfeed/1.0)')
        )

        integration_config = IntegrationConfig(
            poll_generator=os.getenv('POLL_GENERATOR', 'relay').strip().lower(),
            openai_api_key=os.getenv('OPENAI_API_KEY'),
            openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            openai_timeout=_env_int('OPENAI_TIMEOUT', '20')
        )

        app_config = ApplicationConfig(
            min_description_length=_env_int('MIN_DESCRIPTION_LENGTH', '20'),
            require_image=_env_bool('REQUIRE_IMAGE', 'true'),
            transition_settle_ms=_env_int('TRANSITION_SETTLE_MS', '300'),
            reset_grace_minutes=_env_int('RESET_GRACE_MINUTES', '5'),
            cache_path=os.getenv('CACHE_PATH', '.pollfeed_cache.json'),
            fallback_image=os.getenv('FALLBACK_IMAGE', 'fallback.svg'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=_env_bool('VERBOSE_LOGGING', 'false')
        )

        config = Config(
            relay=relay_config,
            integrations=integration_config,
            app=app_config
        )

        self._validate_config(config)
        return config

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        if not config.relay.base_url.startswith(('http://', 'https://')):
            raise ConfigurationError('RELAY_BASE_URL', "must start with http:// or https://")

        if config.relay.timeout < 1:
            raise ConfigurationError('RELAY_TIMEOUT', "must be at least 1 second")

        if config.integrations.poll_generator not in POLL_GENERATORS:
            raise ConfigurationError('POLL_GENERATOR', f"must be one of: {', '.join(POLL_GENERATORS)}")

        if config.uses_openai_generator() and not config.has_openai():
            raise ConfigurationError('OPENAI_API_KEY', "required when POLL_GENERATOR=openai")

        if config.app.min_description_length < 0:
            raise ConfigurationError('MIN_DESCRIPTION_LENGTH', "must not be negative")

        if not 0 <= config.app.transition_settle_ms <= 5000:
            raise ConfigurationError('TRANSITION_SETTLE_MS', "must be between 0 and 5000")

        if not 0 <= config.app.reset_grace_minutes < 60:
            raise ConfigurationError('RESET_GRACE_MINUTES', "must be between 0 and 59")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.app.log_level not in valid_log_levels:
            raise ConfigurationError('LOG_LEVEL', f"must be one of: {', '.join(valid_log_levels)}")

        logger.debug("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        # Set log level
        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        # Configure format
        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        # Update existing handlers
        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')
            handler.setFormatter(formatter)


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
