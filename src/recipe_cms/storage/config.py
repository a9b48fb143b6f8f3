"""Named storage targets for asset fields.

Image fields pick a target by name. Two kinds exist, each with its own
required parameters: ``local`` (files under a directory, served by the app)
and ``s3`` (a remote bucket).
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from recipe_cms.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from recipe_cms.core.config import Settings


class StorageKind(StrEnum):
    LOCAL = "local"
    S3 = "s3"


class AssetType(StrEnum):
    IMAGE = "image"


class ServerRoute(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str

    @field_validator("path")
    @classmethod
    def _wrap_in_slashes(cls, value: str) -> str:
        return "/" + value.strip("/") + "/"


class LocalStorageConfig(BaseModel):
    """Files kept on the local filesystem and served under ``server_route``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal[StorageKind.LOCAL] = StorageKind.LOCAL
    type: AssetType = AssetType.IMAGE
    url_template: str
    server_route: ServerRoute | None = None
    storage_path: str

    @field_validator("url_template")
    @classmethod
    def _has_path_placeholder(cls, value: str) -> str:
        if "{path}" not in value:
            msg = "url_template must contain a '{path}' placeholder"
            raise ValueError(msg)
        return value

    def generate_url(self, path: str) -> str:
        return self.url_template.format(path=path)


class S3StorageConfig(BaseModel):
    """Files kept in a remote S3-compatible bucket."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal[StorageKind.S3] = StorageKind.S3
    type: AssetType = AssetType.IMAGE
    bucket_name: str = Field(min_length=1)
    region: str = Field(min_length=1)
    access_key_id: str = Field(min_length=1)
    secret_access_key: SecretStr

    def generate_url(self, path: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{path}"


StorageConfig = Annotated[
    LocalStorageConfig | S3StorageConfig,
    Field(discriminator="kind"),
]


def build_storage(settings: Settings) -> dict[str, StorageConfig]:
    """Build the named storage targets from settings.

    Raises:
        ConfigurationError: If a target's parameters are missing or malformed.
    """
    local = settings.storage.local
    try:
        return {
            "s3": S3StorageConfig(
                bucket_name=settings.S3_BUCKET_NAME,
                region=settings.S3_REGION,
                access_key_id=settings.S3_ACCESS_KEY_ID,
                secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            ),
            "local": LocalStorageConfig(
                url_template=local.url_template,
                server_route=ServerRoute(path=local.server_route)
                if local.server_route
                else None,
                storage_path=local.storage_path,
            ),
        }
    except ValueError as e:
        msg = f"Invalid storage configuration: {e}"
        raise ConfigurationError(msg) from e
