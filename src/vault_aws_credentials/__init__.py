"""Vault AWS credentials - AWS SDK credentials issued by HashiCorp Vault."""

__version__ = "0.1.0"
