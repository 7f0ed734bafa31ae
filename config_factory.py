"""
Configuration Factory - Centralized configuration management for MetaPoker
Provides type-safe configuration with validation and environment-specific settings.
"""

import os
import logging
from typing import Any, Dict, List, Optional, Type, Union
from enum import Enum
from dataclasses import dataclass, field


DEV_SECRET_KEY = 'dev-secret-key-change-in-production'
DEFAULT_STORY = 'Default story: feature implementation estimate'
LOG_LEVELS = ('debug', 'info', 'warning', 'error', 'critical')


class Environment(Enum):
    """Environment types for configuration"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


@dataclass
class AppConfig:
    """Application configuration with type safety and validation"""

    # Core Flask settings
    secret_key: str = field(default_factory=lambda: DEV_SECRET_KEY)
    debug: bool = False
    flask_env: str = 'development'

    # Server settings
    host: str = '0.0.0.0'
    port: int = 3000
    cors_origin: str = '*'

    # Game settings
    max_players: int = 8
    timer_duration: int = 300  # seconds
    default_story: str = DEFAULT_STORY
    max_name_length: int = 20

    # Rate limiting settings
    rate_limit_window_seconds: int = 900  # 15 minutes
    rate_limit_max: int = 100
    rate_limit_per_second: int = 10
    move_rate_limit_per_second: int = 20

    # Metrics settings
    metrics_interval_seconds: int = 30
    high_memory_mb: int = 500
    slow_operation_ms: int = 100

    # Logging settings
    log_level: str = 'info'
    log_to_console: bool = True
    log_to_file: bool = False
    log_path: str = './logs'

    # Gunicorn settings (for production deployment)
    worker_connections: int = 1000
    timeout: int = 30
    keepalive: int = 2

    # Environment
    environment: Environment = Environment.DEVELOPMENT

    def __post_init__(self):
        """Validate configuration after initialization"""
        self._validate()

    def _validate(self):
        """Validate configuration values"""
        errors = []

        if self.port < 1 or self.port > 65535:
            errors.append(f"Invalid port number: {self.port}")

        if self.max_players < 2 or self.max_players > 20:
            errors.append(f"Invalid max_players: {self.max_players} (must be 2-20)")

        if self.timer_duration < 30 or self.timer_duration > 3600:
            errors.append(f"Invalid timer_duration: {self.timer_duration} (must be 30-3600 seconds)")

        if not self.default_story or len(self.default_story) > 500:
            errors.append("Invalid default_story: must be 1-500 characters")

        if self.max_name_length < 2 or self.max_name_length > 100:
            errors.append(f"Invalid max_name_length: {self.max_name_length}")

        if self.rate_limit_window_seconds < 1 or self.rate_limit_window_seconds > 86400:
            errors.append(f"Invalid rate_limit_window_seconds: {self.rate_limit_window_seconds}")

        if self.rate_limit_max < 1 or self.rate_limit_max > 100000:
            errors.append(f"Invalid rate_limit_max: {self.rate_limit_max}")

        if self.rate_limit_per_second < 1 or self.rate_limit_per_second > self.rate_limit_max:
            errors.append(f"Invalid rate_limit_per_second: {self.rate_limit_per_second}")

        if self.move_rate_limit_per_second < 1 or self.move_rate_limit_per_second > 1000:
            errors.append(f"Invalid move_rate_limit_per_second: {self.move_rate_limit_per_second}")

        if self.metrics_interval_seconds < 1 or self.metrics_interval_seconds > 3600:
            errors.append(f"Invalid metrics_interval_seconds: {self.metrics_interval_seconds}")

        if self.high_memory_mb < 1:
            errors.append(f"Invalid high_memory_mb: {self.high_memory_mb}")

        if self.slow_operation_ms < 1:
            errors.append(f"Invalid slow_operation_ms: {self.slow_operation_ms}")

        if self.log_level.lower() not in LOG_LEVELS:
            errors.append(f"Invalid log_level: {self.log_level} (must be one of {', '.join(LOG_LEVELS)})")

        if not self.cors_origin.strip():
            errors.append("Invalid cors_origin: must be '*' or a comma-separated list of origins")

        if self.environment == Environment.PRODUCTION and self.secret_key == DEV_SECRET_KEY:
            errors.append("Production environment requires a secure SECRET_KEY")

        if errors:
            raise ConfigError(f"Configuration validation failed: {'; '.join(errors)}")

    @property
    def cors_allowed_origins(self) -> Union[str, List[str]]:
        """CORS setting in the form Flask-SocketIO expects"""
        if self.cors_origin.strip() == '*':
            return '*'
        return [origin.strip() for origin in self.cors_origin.split(',') if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.environment == Environment.TESTING


class ConfigurationFactory:
    """
    Factory for creating and managing application configuration.

    Features:
    - Environment variable loading with strict type conversion
    - Configuration validation (invalid values abort startup)
    - Environment-specific defaults
    - Singleton pattern for global config access
    """

    _instance: Optional['ConfigurationFactory'] = None
    _config: Optional[AppConfig] = None

    def __new__(cls) -> 'ConfigurationFactory':
        """Singleton pattern implementation"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the configuration factory"""
        if not hasattr(self, '_initialized'):
            self._logger = logging.getLogger(__name__)
            self._env_overrides: Dict[str, Any] = {}
            self._initialized = True

    def load_from_environment(self, env_prefix: str = '') -> AppConfig:
        """
        Load configuration from environment variables.

        Args:
            env_prefix: Optional prefix for environment variables (e.g., 'METAPOKER_')

        Returns:
            Configured AppConfig instance

        Raises:
            ConfigError: If a variable cannot be parsed or a value is out of range
        """
        def get_env_var(key: str, default: Any = None, var_type: Type = str) -> Any:
            """Get environment variable with type conversion"""
            env_key = f"{env_prefix}{key}" if env_prefix else key
            value = os.environ.get(env_key)

            if value is None or value == '':
                return default

            if var_type == bool:
                lowered = value.strip().lower()
                if lowered in ('true', '1', 'yes', 'on'):
                    return True
                if lowered in ('false', '0', 'no', 'off'):
                    return False
                raise ConfigError(f"Invalid boolean value for {env_key}: {value!r}")
            elif var_type == int:
                try:
                    return int(value)
                except ValueError:
                    raise ConfigError(f"Invalid integer value for {env_key}: {value!r}")
            else:
                return value

        flask_env = get_env_var('FLASK_ENV', 'development')
        if flask_env == 'development':
            environment = Environment.DEVELOPMENT
            debug = True
        elif flask_env == 'testing':
            environment = Environment.TESTING
            debug = True
        elif flask_env == 'production':
            environment = Environment.PRODUCTION
            debug = False
        else:
            raise ConfigError(f"Invalid FLASK_ENV: {flask_env!r} (must be development, testing or production)")

        config = AppConfig(
            # Core Flask settings
            secret_key=get_env_var('SECRET_KEY', DEV_SECRET_KEY),
            debug=get_env_var('DEBUG', debug, bool),
            flask_env=flask_env,

            # Server settings
            host=get_env_var('HOST', '0.0.0.0'),
            port=get_env_var('PORT', 3000, int),
            cors_origin=get_env_var('CORS_ORIGIN', '*'),

            # Game settings
            max_players=get_env_var('MAX_PLAYERS', 8, int),
            timer_duration=get_env_var('TIMER_DURATION', 300, int),
            default_story=get_env_var('DEFAULT_STORY', DEFAULT_STORY),
            max_name_length=get_env_var('MAX_NAME_LENGTH', 20, int),

            # Rate limiting settings
            rate_limit_window_seconds=get_env_var('RATE_LIMIT_WINDOW_SECONDS', 900, int),
            rate_limit_max=get_env_var('RATE_LIMIT_MAX', 100, int),
            rate_limit_per_second=get_env_var('RATE_LIMIT_PER_SECOND', 10, int),
            move_rate_limit_per_second=get_env_var('MOVE_RATE_LIMIT_PER_SECOND', 20, int),

            # Metrics settings
            metrics_interval_seconds=get_env_var('METRICS_INTERVAL_SECONDS', 30, int),
            high_memory_mb=get_env_var('HIGH_MEMORY_MB', 500, int),
            slow_operation_ms=get_env_var('SLOW_OPERATION_MS', 100, int),

            # Logging settings
            log_level=get_env_var('LOG_LEVEL', 'info'),
            log_to_console=get_env_var('ENABLE_CONSOLE_LOG', True, bool),
            log_to_file=get_env_var('ENABLE_FILE_LOG', False, bool),
            log_path=get_env_var('LOG_PATH', './logs'),

            # Gunicorn settings
            worker_connections=get_env_var('WORKER_CONNECTIONS', 1000, int),
            timeout=get_env_var('TIMEOUT', 30, int),
            keepalive=get_env_var('KEEPALIVE', 2, int),

            environment=environment
        )

        # Apply any manual overrides
        for key, value in self._env_overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)
        if self._env_overrides:
            config._validate()

        self._config = config
        self._logger.info(f"Configuration loaded for environment: {environment.value}")
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> AppConfig:
        """
        Load configuration from dictionary (useful for testing).

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            Configured AppConfig instance
        """
        config_dict = dict(config_dict)
        if 'environment' in config_dict and isinstance(config_dict['environment'], str):
            config_dict['environment'] = Environment(config_dict['environment'])

        self._config = AppConfig(**config_dict)
        return self._config

    def override_setting(self, key: str, value: Any) -> 'ConfigurationFactory':
        """
        Override a specific configuration setting.

        Args:
            key: Configuration key to override
            value: New value for the setting

        Returns:
            Self for method chaining
        """
        self._env_overrides[key] = value

        if self._config and hasattr(self._config, key):
            setattr(self._config, key, value)
            self._config._validate()

        return self

    def get_config(self) -> AppConfig:
        """
        Get the current configuration.

        Raises:
            ConfigError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded. Call load_from_environment() or load_from_dict() first.")
        return self._config

    def reset(self) -> 'ConfigurationFactory':
        """Reset the factory (useful for testing)"""
        self._config = None
        self._env_overrides.clear()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert current configuration to dictionary"""
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        config_dict = {}
        for field_info in self._config.__dataclass_fields__.values():
            value = getattr(self._config, field_info.name)
            if isinstance(value, Environment):
                config_dict[field_info.name] = value.value
            else:
                config_dict[field_info.name] = value

        return config_dict

    def get_flask_config(self) -> Dict[str, Any]:
        """
        Get Flask-compatible configuration dictionary.

        Returns:
            Dictionary suitable for Flask app.config.update()
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        return {
            'SECRET_KEY': self._config.secret_key,
            'DEBUG': self._config.debug,
            'TESTING': self._config.is_testing,
            'MAX_PLAYERS': self._config.max_players,
            'TIMER_DURATION': self._config.timer_duration,
            'MAX_NAME_LENGTH': self._config.max_name_length,
        }


# Global factory instance
_config_factory = ConfigurationFactory()


def get_config() -> AppConfig:
    """Get the global application configuration"""
    return _config_factory.get_config()


def load_config(env_prefix: str = '') -> AppConfig:
    """Load configuration from environment variables"""
    return _config_factory.load_from_environment(env_prefix)


def load_config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """Load configuration from dictionary"""
    return _config_factory.load_from_dict(config_dict)


def override_config(key: str, value: Any) -> ConfigurationFactory:
    """Override a configuration setting"""
    return _config_factory.override_setting(key, value)


def reset_config() -> ConfigurationFactory:
    """Reset configuration (for testing)"""
    return _config_factory.reset()
