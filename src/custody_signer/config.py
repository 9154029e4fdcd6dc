"""Configuration settings for the custody backends."""

import os
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

# Configuration Constants
ENV_PROJECT_ID = "GOOGLE_CLOUD_PROJECT"
ENV_LOCATION_ID = "GOOGLE_CLOUD_REGION"
ENV_KEY_RING_ID = "KEY_RING"
ENV_KEY_ID = "KEY_NAME"
ENV_KEY_VERSION = "KEY_VERSION"
ENV_GOOGLE_CREDENTIALS = "GOOGLE_APPLICATION_CREDENTIALS"

ENV_AWS_KMS_KEY_ID = "AWS_KMS_KEY_ID"
ENV_AWS_REGION = "AWS_REGION"
ENV_AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
ENV_AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
DEFAULT_AWS_REGION = "us-east-1"

ENV_PRIVATE_KEY = "PRIVATE_KEY"
ENV_MNEMONIC = "MNEMONIC"
DEFAULT_ACCOUNT_PATH = "m/44'/60'/0'/0/0"


def _non_empty(v: str) -> str:
    if not v or not v.strip():
        msg = "Field cannot be empty or whitespace"
        raise ValueError(msg)
    return v.strip()


class GcpKmsConfig(BaseModel):
    """Settings for a Google Cloud KMS key version."""

    provider: Literal["gcp"] = "gcp"

    project_id: str
    location_id: str
    key_ring_id: str
    key_id: str
    key_version: int = Field(1, ge=1)

    # Falls back to application default credentials when unset
    service_account_path: str | None = None

    class Config:
        validate_assignment = True

    @field_validator("project_id", "location_id", "key_ring_id", "key_id")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        """Validate that fields are not empty or whitespace."""
        return _non_empty(v)

    @property
    def key_version_path(self) -> str:
        """Full resource name of the CryptoKeyVersion."""
        return (
            f"projects/{self.project_id}/locations/{self.location_id}/keyRings/{self.key_ring_id}"
            f"/cryptoKeys/{self.key_id}/cryptoKeyVersions/{self.key_version}"
        )

    def client_key(self) -> tuple:
        return ("gcp", self.service_account_path)

    def update(self, **values) -> None:
        """Update several fields at once, validating each assignment."""
        for name, value in values.items():
            setattr(self, name, value)

    @classmethod
    def from_env(cls) -> "GcpKmsConfig":
        """
        Create configuration from environment variables.

        Returns:
            GcpKmsConfig: Configuration instance with values from environment variables.

        Example:
            ```python
            config = GcpKmsConfig.from_env()
            provider = GoogleKmsProvider(config)
            ```
        """
        return cls(
            project_id=os.getenv(ENV_PROJECT_ID, ""),
            location_id=os.getenv(ENV_LOCATION_ID, ""),
            key_ring_id=os.getenv(ENV_KEY_RING_ID, ""),
            key_id=os.getenv(ENV_KEY_ID, ""),
            key_version=int(os.getenv(ENV_KEY_VERSION, "1")),
            service_account_path=os.getenv(ENV_GOOGLE_CREDENTIALS) or None,
        )


class AwsKmsConfig(BaseModel):
    """Settings for an AWS KMS asymmetric key."""

    provider: Literal["aws"] = "aws"

    key_id: str
    region: str = DEFAULT_AWS_REGION
    access_key_id: str | None = None
    secret_access_key: str | None = Field(None, repr=False)

    @field_validator("key_id", "region")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        return _non_empty(v)

    @model_validator(mode="after")
    def validate_credentials(self) -> "AwsKmsConfig":
        if bool(self.access_key_id) != bool(self.secret_access_key):
            msg = "access_key_id and secret_access_key must be given together"
            raise ValueError(msg)
        return self

    def client_key(self) -> tuple:
        return ("aws", self.region, self.access_key_id)

    @classmethod
    def from_env(cls) -> "AwsKmsConfig":
        """Create configuration from environment variables."""
        return cls(
            key_id=os.getenv(ENV_AWS_KMS_KEY_ID, ""),
            region=os.getenv(ENV_AWS_REGION, DEFAULT_AWS_REGION),
            access_key_id=os.getenv(ENV_AWS_ACCESS_KEY_ID) or None,
            secret_access_key=os.getenv(ENV_AWS_SECRET_ACCESS_KEY) or None,
        )


class LocalKeyConfig(BaseModel):
    """Settings for a key held in process memory."""

    provider: Literal["local"] = "local"

    private_key: str | None = Field(None, repr=False)
    mnemonic: str | None = Field(None, repr=False)
    account_path: str = DEFAULT_ACCOUNT_PATH

    @model_validator(mode="after")
    def validate_key_source(self) -> "LocalKeyConfig":
        if bool(self.private_key) == bool(self.mnemonic):
            msg = "Exactly one of private_key or mnemonic must be provided"
            raise ValueError(msg)
        return self

    @classmethod
    def from_env(cls) -> "LocalKeyConfig":
        """Create configuration from environment variables."""
        return cls(
            private_key=os.getenv(ENV_PRIVATE_KEY) or None,
            mnemonic=os.getenv(ENV_MNEMONIC) or None,
        )


ProviderConfig = Annotated[GcpKmsConfig | AwsKmsConfig | LocalKeyConfig, Field(discriminator="provider")]
