"""Vault connector and parser modules."""

from simpletasks.vault.connector import VaultConnector
from simpletasks.vault.parser import parse_markdown

__all__ = ["VaultConnector", "parse_markdown"]
