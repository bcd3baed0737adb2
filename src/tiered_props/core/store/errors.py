# src/tiered_props/core/store/errors.py
"""
Exceções canônicas do ConfigStore.

Este módulo define a hierarquia oficial de exceções utilizadas durante o
bootstrap, carregamento, mutação e persistência de um ConfigStore.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Falhas de escrita em disco são fatais e propagadas ao chamador
    - Falhas de leitura durante `load()` são sinais não fatais
    - Violações de estado são diagnosticadas, não silenciadas

Invariantes:
    - Todas as exceções do store herdam de `ConfigStoreError`
    - `StorageIOError` é também um `OSError` (capturável como `IOError`)

Limites explícitos:
    - Não realiza retry ou recovery
    - Não registra logs (responsabilidade do store)
"""

from __future__ import annotations


class ConfigStoreError(Exception):
    """
    Exceção base para erros do ConfigStore.

    Permite captura genérica de qualquer falha originada pelo store,
    distinguindo-a de erros do código do owner.
    """


class StorageIOError(ConfigStoreError, OSError):
    """
    Falha ao criar ou escrever o diretório ou os arquivos de armazenamento.

    Decisões arquiteturais:
        - Propaga sem captura a partir de `initialize()` e `save()`
        - Herda de `OSError` para que chamadores existentes que capturam
          `IOError` continuem funcionando

    Limites explícitos:
        - Não tenta novamente
        - Não remove arquivos parcialmente escritos
    """


class ReadError(ConfigStoreError):
    """
    Falha ao ler ou interpretar um arquivo durante `load()`.

    Nunca propaga para fora do store: é convertida em warning e o
    mapeamento afetado mantém o estado anterior à leitura.
    """


class InvalidStateError(ConfigStoreError):
    """
    Mutação tentada em um estado do ciclo de vida que não a permite.

    Exemplos:
        - `set_default()` depois de LOADED
        - `set_value()` antes de LOADED

    Em modo padrão é registrada como warning e a operação é descartada.
    Em modo `strict` é levantada.
    """


class UnsupportedStoreFormatError(ConfigStoreError, ValueError):
    """Extensão de arquivo sem codec registrado."""
