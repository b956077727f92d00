import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

from catalog_api.exceptions import ConfigurationError


DEFAULT_MEDIA_API_BASE_URL = "https://api.cloudinary.com"
DEFAULT_PRODUCTS_CONTAINER = "products"


class MediaSettings(BaseModel):
    """
    Settings for the hosted media (image upload) service.
    """

    cloud_name: str
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    api_base_url: str = DEFAULT_MEDIA_API_BASE_URL

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def signed(self) -> bool:
        """True when requests can be signed with the API key and secret."""
        return bool(self.api_key and self.api_secret)


class CosmosSettings(BaseModel):
    """
    Settings for the Cosmos DB account holding the catalog.
    """

    endpoint: str
    database: str
    products_container: str = DEFAULT_PRODUCTS_CONTAINER
    key: Optional[str] = None  # account key; DefaultAzureCredential when unset

    model_config = ConfigDict(extra="forbid", frozen=True)


class Settings(BaseModel):
    media: MediaSettings
    cosmos: CosmosSettings

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from the process environment.

        Args:
            environ: Mapping to read instead of os.environ

        Raises:
            ConfigurationError: If a required variable is missing, or only one
                of the media API key and secret is set
        """
        env = os.environ if environ is None else environ
        return cls(media=media_settings_from_env(env), cosmos=cosmos_settings_from_env(env))


def _require(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if not value:
        raise ConfigurationError(f"{name} environment variable must be set")
    return value


def media_settings_from_env(env: Mapping[str, str]) -> MediaSettings:
    api_key = env.get("CLOUDINARY_API_KEY") or None
    api_secret = env.get("CLOUDINARY_API_SECRET") or None
    if bool(api_key) != bool(api_secret):
        raise ConfigurationError(
            "CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET must be set together"
        )

    return MediaSettings(
        cloud_name=_require(env, "CLOUDINARY_CLOUD_NAME"),
        api_key=api_key,
        api_secret=api_secret,
        api_base_url=env.get("CLOUDINARY_API_BASE_URL") or DEFAULT_MEDIA_API_BASE_URL,
    )


def cosmos_settings_from_env(env: Mapping[str, str]) -> CosmosSettings:
    return CosmosSettings(
        endpoint=_require(env, "COSMOSDB_ENDPOINT"),
        database=_require(env, "COSMOSDB_DATABASE"),
        products_container=env.get("COSMOSDB_CONTAINER_PRODUCTS") or DEFAULT_PRODUCTS_CONTAINER,
        key=env.get("COSMOSDB_KEY") or None,
    )
