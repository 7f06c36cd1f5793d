from .client import VaultGateway, create_vault_client

__all__ = ["VaultGateway", "create_vault_client"]
