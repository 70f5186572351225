"""Settings loader with hierarchical configuration support."""

import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from vidhost.commons.settings.models import Settings

# Variable names used by existing deployments, mapped onto settings paths.
LEGACY_ENV_ALIASES: dict[str, tuple[str, str]] = {
    "R2_ACCOUNT_ID": ("blob_storage", "account_id"),
    "R2_ACCESS_KEY_ID": ("blob_storage", "access_key"),
    "R2_SECRET_ACCESS_KEY": ("blob_storage", "secret_key"),
    "R2_BUCKET_NAME": ("blob_storage", "bucket"),
    "R2_PUBLIC_URL": ("blob_storage", "public_url"),
    "PORT": ("server", "port"),
    "DATABASE_URL": ("catalog", "url"),
    "__capella_connection_string": ("catalog", "connection_string"),
    "__capella_username": ("catalog", "username"),
    "__capella_password": ("catalog", "password"),
}


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Prefixed environment variables (VIDHOST__SECTION__KEY)
    2. Legacy deployment variables (R2_*, PORT, DATABASE_URL, ...)
    3. Environment-specific config (appsettings.{env}.json)
    4. Base config (appsettings.json)
    """

    ENV_PREFIX = "VIDHOST__"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
        env_file: Path | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to 'config' in current working directory.
            environment: Environment name (dev, staging, prod).
                        Defaults to VIDHOST__APP__ENVIRONMENT or 'dev'.
            env_file: Dotenv file read before the environment. Defaults to .env.
        """
        self.config_dir = config_dir or Path("config")
        self.environment = environment or os.getenv(
            "VIDHOST__APP__ENVIRONMENT", "dev"
        )
        self.env_file = env_file or Path(".env")

    def load(self) -> Settings:
        """Load settings with proper precedence.

        Returns:
            Fully resolved Settings instance.
        """
        # A .env file fills in variables not already set in the environment
        load_dotenv(self.env_file, override=False)

        config = self._load_json("appsettings.json")

        env_config = self._load_json(f"appsettings.{self.environment}.json")
        config = self._deep_merge(config, env_config)

        config = self._deep_merge(config, self._load_legacy_env_vars())
        config = self._deep_merge(config, self._load_env_vars())

        return Settings(**config)

    def _load_env_vars(self) -> dict[str, Any]:
        """Load environment variables with the VIDHOST__ prefix.

        Parses env vars like VIDHOST__BLOB_STORAGE__BUCKET into nested dicts:
        {"blob_storage": {"bucket": "value"}}

        Returns:
            Nested dictionary of environment variable overrides.
        """
        result: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue

            key_path = key[len(self.ENV_PREFIX) :].lower().split("__")

            current = result
            for part in key_path[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]

            if self._is_text_field(key_path):
                current[key_path[-1]] = value
            else:
                current[key_path[-1]] = self._coerce_value(value)

        return result

    def _load_legacy_env_vars(self) -> dict[str, Any]:
        """Map legacy deployment variable names onto settings sections."""
        result: dict[str, Any] = {}
        for env_name, (section, field) in LEGACY_ENV_ALIASES.items():
            value = os.environ.get(env_name)
            if value is None or value == "":
                continue
            coerced = self._coerce_value(value) if field == "port" else value
            result.setdefault(section, {})[field] = coerced
        return result

    def _is_text_field(self, key_path: list[str]) -> bool:
        """Whether the settings field at ``key_path`` holds text.

        Text fields keep the raw value, so an all-digit password or key is
        not turned into a number.
        """
        model: Any = Settings
        annotation: Any = None
        for part in key_path:
            fields = getattr(model, "model_fields", None)
            if not fields or part not in fields:
                return False
            annotation = fields[part].annotation
            model = annotation
        return annotation in (str, str | None)

    def _coerce_value(self, value: str) -> Any:
        """Coerce string environment variable to appropriate type.

        Args:
            value: String value from environment.

        Returns:
            Coerced value (bool, int, float, or original string).
        """
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        # JSON for lists/dicts like CORS_ORIGINS
        if value.startswith(("[", "{")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _load_json(self, filename: str) -> dict[str, Any]:
        """Load JSON config file.

        Args:
            filename: Name of the config file.

        Returns:
            Parsed JSON as dictionary, or empty dict if file doesn't exist.
        """
        path = self.config_dir / filename
        if path.exists():
            with path.open(encoding="utf-8") as f:
                return dict(json.load(f))
        return {}

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries, values in override win."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the global settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _settings = loader.load()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance. Useful for testing."""
    global _settings  # noqa: PLW0603
    _settings = None
