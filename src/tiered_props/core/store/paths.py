# src/tiered_props/core/store/paths.py
"""
Resolução do diretório de armazenamento e nomes dos arquivos do store.

Política de resolução:
    - hint vazio ou ausente → `<cwd>/cfg`
    - hint `H` no Windows   → `<home>/AppData/Local/<H>/cfg`
    - hint `H` nos demais   → `user_data_dir(H)/cfg` (platformdirs)

O segmento final `cfg` é preservado em todas as plataformas.

Invariantes:
    - O caminho retornado é sempre absoluto
    - Os nomes dos arquivos são derivados apenas do nome do owner e da extensão

Limites explícitos:
    - Não cria diretórios nem arquivos
    - Não verifica permissões
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Tuple

from platformdirs import user_data_dir

STORAGE_LEAF = "cfg"
DEFAULT_SUFFIX = "_def"
MAIN_SUFFIX = "_main"

# inválidos em nomes de arquivo no Windows (inclui separadores)
_FORBIDDEN_NAME_CHARS = set('<>:"/\\|?*')


def _app_data_root(hint: str, platform: str) -> Path:
    if platform.startswith("win"):
        return Path.home() / "AppData" / "Local" / hint
    return Path(user_data_dir(hint, appauthor=False))


def resolve_storage_directory(hint: Optional[str], *, platform: Optional[str] = None) -> Path:
    """
    Resolve o diretório absoluto que contém os dois arquivos de um owner.

    Args:
        hint (Optional[str]): Nome da aplicação. Vazio/None usa o diretório
            de trabalho atual.
        platform (Optional[str]): Plataforma alvo; `sys.platform` quando omitido.

    Returns:
        Path: Diretório absoluto terminado em `cfg`.
    """
    if not hint:
        return Path.cwd() / STORAGE_LEAF

    platform = platform or sys.platform
    return _app_data_root(hint, platform).absolute() / STORAGE_LEAF


def store_file_names(owner_name: str, extension: str) -> Tuple[str, str]:
    """
    Deriva `(<owner>_def<ext>, <owner>_main<ext>)`.

    Raises:
        ValueError: Se o nome do owner for vazio ou contiver caracteres inválidos
            para nomes de arquivo (separadores, `<`, `>`, `:`...).
    """
    if not owner_name or owner_name in {".", ".."} or any(c in _FORBIDDEN_NAME_CHARS for c in owner_name):
        raise ValueError(f"Nome de owner inválido para arquivos de configuração: {owner_name!r}")

    return (
        f"{owner_name}{DEFAULT_SUFFIX}{extension}",
        f"{owner_name}{MAIN_SUFFIX}{extension}",
    )
