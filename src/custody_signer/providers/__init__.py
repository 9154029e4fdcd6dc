from custody_signer.config import AwsKmsConfig, GcpKmsConfig, LocalKeyConfig, ProviderConfig
from custody_signer.exceptions import ConfigurationError
from custody_signer.providers.base import SignerProvider


def create_provider(config: ProviderConfig) -> SignerProvider:
    """Build the signing backend described by ``config``."""
    if isinstance(config, GcpKmsConfig):
        from custody_signer.providers.google import GoogleKmsProvider

        return GoogleKmsProvider(config)
    if isinstance(config, AwsKmsConfig):
        from custody_signer.providers.aws import AwsKmsProvider

        return AwsKmsProvider(config)
    if isinstance(config, LocalKeyConfig):
        from custody_signer.providers.local import LocalKeyProvider

        if config.mnemonic:
            return LocalKeyProvider.from_mnemonic(config.mnemonic, config.account_path)
        return LocalKeyProvider(config.private_key)

    msg = f"Unsupported provider configuration: {type(config).__name__}"
    raise ConfigurationError(msg)


__all__ = ["SignerProvider", "create_provider"]
