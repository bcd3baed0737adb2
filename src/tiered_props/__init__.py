# src/tiered_props/__init__.py
"""
tiered-props — configuração chave-valor em dois níveis, baseada em arquivos.

Cada owner obtém um store nomeado com:
    - um conjunto de defaults, declarado em código e regravado a cada inicialização
    - um conjunto principal (runtime), editável e persistido sob demanda,
      que recorre aos defaults para chaves ausentes

Arquitetura em alto nível:
    - core.store → ciclo de vida, resolução de caminhos, codecs e fallback

Limites explícitos:
    - Valores são sempre strings
    - Não há estruturas aninhadas, watch de arquivos nem acesso multiprocesso
"""

from .core.store import (
    ConfigStore,
    ConfigStoreError,
    DefaultsProvider,
    FallbackMapping,
    InvalidStateError,
    LoadReport,
    ReadError,
    StorageIOError,
    StoreState,
    UnsupportedStoreFormatError,
    resolve_storage_directory,
    store_file_names,
)

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
