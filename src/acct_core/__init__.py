"""Account Core - Shared identity and wire constants."""
from .ids import canonical_name, sighash, account_discriminator

__all__ = ["canonical_name", "sighash", "account_discriminator"]
