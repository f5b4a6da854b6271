from pathlib import Path
from typing import Any

import envyaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict, YamlConfigSettingsSource

# Copernicus Data Space Ecosystem endpoints
CATALOGUE_URL = "https://catalogue.dataspace.copernicus.eu/odata/v1/Products"
DOWNLOAD_URL = "https://zipper.dataspace.copernicus.eu/odata/v1/Products"
TOKEN_URL = "https://identity.dataspace.copernicus.eu/auth/realms/CDSE/protocol/openid-connect/token"
CLIENT_ID = "cdse-public"


class EnvYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML source expanding `${VAR}` placeholders from the environment and the `.env` file."""

    def __init__(self, settings_cls: type[BaseSettings]):
        self.dotenv_path = settings_cls.model_config.get("env_file")
        super().__init__(settings_cls)

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        if not Path(file_path).exists():
            return {}
        dotenv_path = self.dotenv_path if self.dotenv_path and Path(self.dotenv_path).exists() else None
        # strict=False leaves unknown placeholders untouched instead of failing
        return dict(envyaml.EnvYAML(file_path, dotenv_path, flatten=False, strict=False))


class SentinelExplorerSettings(BaseSettings):
    """Runtime configuration.

    Values are resolved in order from constructor arguments, `SENTINEL_EXPLORER_*`
    environment variables, the `.env` file and finally `config.yml`. Credentials map
    to `SENTINEL_EXPLORER_USER` and `SENTINEL_EXPLORER_PASS`.
    """

    model_config = SettingsConfigDict(
        yaml_file="config.yml",
        env_file=".env",
        env_prefix="SENTINEL_EXPLORER_",
        extra="ignore",
        populate_by_name=True,
    )

    catalogue_url: str = CATALOGUE_URL
    download_url: str = DOWNLOAD_URL
    token_url: str = TOKEN_URL
    client_id: str = CLIENT_ID
    user: str | None = None
    password: str | None = Field(default=None, validation_alias=AliasChoices("SENTINEL_EXPLORER_PASS"))
    search_limit: int = 100
    timeout: int = 30
    chunk_size: int = 8192

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # config.yml has the lowest priority, explicit values always win
        return init_settings, env_settings, dotenv_settings, EnvYamlConfigSettingsSource(settings_cls)


_settings: SentinelExplorerSettings | None = None


def get_settings(**overrides: Any) -> SentinelExplorerSettings:
    """Settings shared by the whole process, loaded on first use.

    Overrides only apply to that first load; call `reset_settings()` to reload.
    """
    global _settings
    if _settings is None:
        _settings = SentinelExplorerSettings(**overrides)
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
