# src/tiered_props/core/store/__init__.py
"""
Camada de armazenamento do tiered-props.

Responsabilidades do pacote:
    - Resolver o diretório de armazenamento de um owner
    - Criar diretório e arquivos de forma não destrutiva
    - Ler e gravar arquivos chave-valor planos (properties, YAML plano)
    - Encadear runtime → defaults com fallback explícito
    - Controlar o ciclo de vida UNCONFIGURED → BOOTSTRAPPING → LOADED

Invariantes:
    - Um arquivo de defaults e um arquivo principal por owner
    - Defaults congelados após o carregamento
    - Runtime imutável antes do carregamento
"""

from .chain import FallbackMapping
from .errors import (
    ConfigStoreError,
    InvalidStateError,
    ReadError,
    StorageIOError,
    UnsupportedStoreFormatError,
)
from .paths import resolve_storage_directory, store_file_names
from .store import ConfigStore, DefaultsProvider
from .types import LoadReport, StoreState

__all__ = [
    "ConfigStore",
    "ConfigStoreError",
    "DefaultsProvider",
    "FallbackMapping",
    "InvalidStateError",
    "LoadReport",
    "ReadError",
    "StorageIOError",
    "StoreState",
    "UnsupportedStoreFormatError",
    "resolve_storage_directory",
    "store_file_names",
]
