# src/tiered_props/core/store/types.py
"""
Tipos canônicos do ciclo de vida do ConfigStore.

Este módulo define:
    - `StoreState`: os três estados do ciclo de vida de um store
    - `LoadReport`: o resultado imutável de uma execução de `load()`

Os valores do enum são strings para facilitar inspeção, logs e
serialização de diagnósticos.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


class StoreState(str, Enum):
    """
    Estados do ciclo de vida de um ConfigStore.

    Estados definidos:
        - UNCONFIGURED: antes de `initialize()`; o mapeamento de runtime não existe
        - BOOTSTRAPPING: dentro de `initialize()`, antes do fim de `load()`;
          defaults mutáveis, runtime inacessível
        - LOADED: estado terminal; defaults congelados, runtime mutável e legível

    Decisões arquiteturais:
        - O estado é um valor explícito, não um booleano espalhado pelos métodos
        - As regras de mutação são derivadas do estado em um único ponto

    Invariantes:
        - Não existe transição de volta para UNCONFIGURED
    """
    UNCONFIGURED = "unconfigured"
    BOOTSTRAPPING = "bootstrapping"
    LOADED = "loaded"

    @property
    def allows_defaults(self) -> bool:
        return self is not StoreState.LOADED

    @property
    def allows_values(self) -> bool:
        return self is StoreState.LOADED


@dataclass(frozen=True)
class LoadReport:
    """
    Resultado imutável de uma execução de `load()`.

    Consolida onde os arquivos foram lidos, quantas entradas foram
    carregadas e quais falhas não fatais ocorreram. Falhas de leitura
    não interrompem o carregamento: aparecem apenas em `warnings`.

    Invariantes:
        - `values_loaded` conta apenas entradas próprias do runtime
          (o fallback para defaults não é contado)
        - `ok` é verdadeiro se e somente se não houve warnings
        - `warnings` é uma tupla: o relatório não muda depois de criado
    """
    storage_directory: Optional[Path]
    defaults_loaded: int
    values_loaded: int
    warnings: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "storage_directory": str(self.storage_directory) if self.storage_directory else None,
            "defaults_loaded": self.defaults_loaded,
            "values_loaded": self.values_loaded,
            "warnings": list(self.warnings),
        }
