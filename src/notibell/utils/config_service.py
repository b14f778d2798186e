"""
Configuration service for centralized config management with type safety and schema validation.
"""
import json
import copy
import logging

from typing import Dict, Any, Optional, Type, TypeVar, List
from pathlib import Path

# Use standard logging for configuration service to avoid circular dependencies
info = logging.info
warning = logging.warning
error = logging.error
debug = logging.debug

T = TypeVar('T')


class ConfigurationError(Exception):
    """Raised when configuration operations fail"""
    pass


class ValidationError(ConfigurationError):
    """Raised when configuration validation fails"""
    pass


DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:5000/api",
        "token": "",
        "timeout_s": 10.0,
    },
    "notifications": {
        "page_size": 1000,
        "preview_size": 3,
        "poll_interval_s": 30,
        "listing_route": "/notifications",
        "listing_page_size": 50,
        "badge_cap": 99,
        "message_word_limit": 6,
    },
    "logging": {
        "level": "INFO",
        "log_dir": "data/logs",
        "log_file_rotation_mb": 10,
    },
    "ui": {
        "title": "Admin Dashboard",
        "port": 8080,
    },
}


class ConfigurationService:
    """Centralized configuration management with type safety, persistence and schema validation"""

    API_SCHEMA = {
        "required_fields": ["base_url"],
        "optional_fields": ["token", "timeout_s"],
        "field_types": {
            "base_url": str,
            "token": str,
            "timeout_s": (int, float),
        },
    }

    NOTIFICATIONS_SCHEMA = {
        "required_fields": [],
        "optional_fields": [
            "page_size",
            "preview_size",
            "poll_interval_s",
            "listing_route",
            "listing_page_size",
            "badge_cap",
            "message_word_limit",
        ],
        "field_types": {
            "page_size": int,
            "preview_size": int,
            "poll_interval_s": (int, float),
            "listing_route": str,
            "listing_page_size": int,
            "badge_cap": int,
            "message_word_limit": int,
        },
        "positive_fields": ["page_size", "preview_size", "listing_page_size", "badge_cap", "message_word_limit"],
    }

    def __init__(self, config_path: Path, default_config_path: Path):
        self.config_path = Path(config_path)
        self.default_config_path = Path(default_config_path)
        self._config_cache: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from files"""
        try:
            default_config = copy.deepcopy(DEFAULT_CONFIG)
            if self.default_config_path.exists():
                with open(self.default_config_path, 'r', encoding='utf-8') as f:
                    default_config = self._deep_merge(default_config, json.load(f))

            user_config = {}
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    user_config = json.load(f)

            self._config_cache = self._deep_merge(default_config, user_config)
            validation_errors = self.validate_all_configs()
            if validation_errors:
                raise ConfigurationError(f"Configuration validation failed: {validation_errors}")
            info(f"Configuration loaded successfully from {self.config_path}")

        except Exception as e:
            error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _deep_merge(self, default: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries"""
        result = default.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _validate_config(self, config: Dict[str, Any], schema: Dict[str, Any], config_type: str) -> List[str]:
        """Validate configuration against schema and return list of errors"""
        errors = []

        for field in schema.get("required_fields", []):
            if field not in config:
                errors.append(f"Missing required field: {field}")

        field_types = schema.get("field_types", {})
        for field, expected_type in field_types.items():
            if field not in config:
                continue
            value = config[field]
            # bool is an int subclass but never a valid number here
            if isinstance(value, bool) or not isinstance(value, expected_type):
                names = (
                    expected_type.__name__ if isinstance(expected_type, type)
                    else '/'.join(t.__name__ for t in expected_type)
                )
                errors.append(f"Field '{field}' should be of type {names}, got {type(value).__name__}")

        for field in schema.get("positive_fields", []):
            value = config.get(field)
            if isinstance(value, int) and not isinstance(value, bool) and value <= 0:
                errors.append(f"Field '{field}' must be positive, got {value}")

        # Unknown fields are warnings, not errors
        all_known_fields = set(schema.get("required_fields", [])) | set(schema.get("optional_fields", []))
        for field in set(config.keys()) - all_known_fields:
            warning(f"Unknown field in {config_type} config: {field}")

        return errors

    def validate_all_configs(self) -> Dict[str, List[str]]:
        """Validate all configurations and return errors by section"""
        validation_errors = {}
        for section, schema in (("api", self.API_SCHEMA), ("notifications", self.NOTIFICATIONS_SCHEMA)):
            config = self.get_section(section)
            if not isinstance(config, dict):
                validation_errors[section] = [f"Section '{section}' must be an object"]
                continue
            errors = self._validate_config(config, schema, section)
            if errors:
                validation_errors[section] = errors
        return validation_errors

    def get(self, path: str, expected_type: Optional[Type[T]] = None, default: Optional[T] = None) -> Any:
        """Get configuration value by dot notation path"""
        keys = path.split('.')
        value = self._config_cache

        try:
            for key in keys:
                value = value[key]

            if expected_type is not None and not isinstance(value, expected_type):
                warning(f"Config value at {path} is not of expected type {expected_type}")
                return default

            return value
        except (KeyError, TypeError):
            return default

    def set(self, path: str, value: Any) -> None:
        """Set configuration value by dot notation path"""
        try:
            keys = path.split('.')
            current = self._config_cache

            for key in keys[:-1]:
                if key not in current:
                    current[key] = {}
                current = current[key]

            current[keys[-1]] = value
            self._save_config()

        except Exception as e:
            error(f"Failed to set config value at {path}: {e}")
            raise ConfigurationError(f"Failed to set config value: {e}") from e

    def _save_config(self) -> None:
        """Save configuration to file"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self._config_cache, f, indent=2, ensure_ascii=False)
            debug(f"Configuration saved to {self.config_path}")
        except Exception as e:
            error(f"Failed to save configuration: {e}")
            raise ConfigurationError(f"Failed to save configuration: {e}") from e

    def get_section(self, section_name: str) -> Any:
        """Get raw configuration section value (dict, list, or other types)"""
        return self._config_cache.get(section_name, {})

    def get_configuration(self) -> Dict[str, Any]:
        """Return the entire configuration cache as a dictionary"""
        return copy.deepcopy(self._config_cache)

    def reload(self) -> None:
        """Reload configuration from files"""
        self._load_config()


# Global configuration service instance
_config_service_instance: Optional[ConfigurationService] = None


def get_config_service() -> Optional[ConfigurationService]:
    """Get the global configuration service instance"""
    return _config_service_instance


def set_config_service(service: Optional[ConfigurationService]) -> None:
    """Set the global configuration service instance"""
    global _config_service_instance
    _config_service_instance = service
