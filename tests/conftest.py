# tests/conftest.py
"""
Fixtures compartilhados para testes do tiered-props.

Este módulo define fixtures reutilizáveis que fornecem:
- um diretório de trabalho isolado (hint vazio → `./cfg`)
- um diretório de dados de usuário isolado (hint não vazio)
- owners concretos mínimos (subclasse e provider por composição)

Decisões arquiteturais:
    - Todo I/O acontece dentro de `tmp_path`
    - Owners são retornados como classes, não instâncias, para que cada
      teste controle quantos stores cria
    - Nenhuma fixture chama `initialize()`

Limites explícitos:
    - Não validar comportamento do store
    - Não configurar handlers de logging
"""

import pytest

from tiered_props import ConfigStore


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Diretório de trabalho isolado; `./cfg` passa a apontar para dentro de `tmp_path`."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def user_data_home(tmp_path, monkeypatch):
    """
    Raiz isolada para diretórios de dados por usuário.

    Redireciona `HOME` e `XDG_DATA_HOME`, cobrindo tanto o ramo Windows
    (`<home>/AppData/Local`) quanto o ramo platformdirs em Linux.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    return home


@pytest.fixture
def Widget():
    """
    Owner concreto por herança com dois defaults (`color`, `size`).

    Os arquivos do store são nomeados a partir do nome da classe: `Widget`.
    """

    class Widget(ConfigStore):
        def populate_defaults(self):
            self.set_default("color", "red")
            self.set_default("size", "10")

    return Widget


@pytest.fixture
def gadget_provider():
    """Provider por composição; o owner é nomeado pelo tipo (`GadgetDefaults`)."""

    class GadgetDefaults:
        def populate_defaults(self, store):
            store.set_default("mode", "auto")
            store.set_default("retries", "3")

    return GadgetDefaults()
