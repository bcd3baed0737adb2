# src/tiered_props/core/store/chain.py
"""
Mapeamento com fallback explícito em dois níveis.

A busca consulta primeiro as entradas próprias e, em caso de ausência,
o mapeamento pai (defaults). O pai nunca é mutado por este objeto.
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional


class FallbackMapping(Mapping[str, str]):
    """
    Entradas próprias de runtime encadeadas a um mapeamento de defaults.

    Invariantes:
        - `own` contém apenas o que foi definido explicitamente no runtime
        - Toda chave do pai é visível, a menos que sobrescrita
        - `len()` e iteração cobrem a união das chaves
    """

    def __init__(self, parent: Optional[Mapping[str, str]] = None) -> None:
        self._own: Dict[str, str] = {}
        self._parent: Mapping[str, str] = parent if parent is not None else {}

    @property
    def own(self) -> Dict[str, str]:
        return dict(self._own)

    @property
    def parent(self) -> Mapping[str, str]:
        return self._parent

    def set(self, key: str, value: str) -> None:
        self._own[key] = value

    def update_own(self, values: Mapping[str, str]) -> None:
        self._own.update(values)

    def lookup(self, key: str) -> Optional[str]:
        if key in self._own:
            return self._own[key]
        return self._parent.get(key)

    def __getitem__(self, key: str) -> str:
        value = self.lookup(key)
        if value is None:
            raise KeyError(key)
        return value

    def __iter__(self) -> Iterator[str]:
        yield from self._own
        for key in self._parent:
            if key not in self._own:
                yield key

    def __len__(self) -> int:
        return len(self._own) + sum(1 for k in self._parent if k not in self._own)

    def __repr__(self) -> str:
        return f"FallbackMapping(own={self._own!r}, parent={dict(self._parent)!r})"
