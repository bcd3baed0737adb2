# src/tiered_props/core/store/store.py
"""
ConfigStore: armazenamento chave-valor em dois níveis, baseado em arquivos.

Um owner (subclasse ou provider injetado) declara seus defaults; o store
persiste esses defaults em `<Owner>_def<ext>` a cada inicialização e mantém
um mapeamento de runtime, persistido sob demanda em `<Owner>_main<ext>`,
que recorre aos defaults para chaves ausentes.

Ciclo de vida (ver `StoreState`):
    UNCONFIGURED → BOOTSTRAPPING → LOADED

Ordem de `initialize()`:
    1. estado BOOTSTRAPPING, defaults e runtime descartados
    2. resolução do diretório e dos nomes de arquivo
    3. `ensure_storage()` (não destrutivo)
    4. `populate_defaults()`
    5. `save_defaults()` (sobrescreve o arquivo de defaults)
    6. `load()` (defaults do disco, depois runtime encadeado)

Decisões arquiteturais:
    - Falhas de escrita (`StorageIOError`) propagam ao chamador
    - Falhas de leitura em `load()` são warnings, nunca exceções
    - Violações de estado são rejeitadas com diagnóstico; em modo `strict`
      são levantadas como `InvalidStateError`
    - Diagnósticos são registrados em `events`/`warnings` e enviados ao
      logger do módulo

Limites explícitos:
    - Não é thread-safe
    - Não faz locking entre processos
    - Não realiza escrita atômica
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

from .chain import FallbackMapping
from .codec import get_codec
from .errors import InvalidStateError, ReadError, StorageIOError
from .paths import resolve_storage_directory, store_file_names
from .types import LoadReport, StoreState

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".properties"


@runtime_checkable
class DefaultsProvider(Protocol):
    """
    Fornecedor do esquema de defaults de um owner.

    A única operação permitida dentro de `populate_defaults` é chamar
    `store.set_default(key, value)`.
    """

    def populate_defaults(self, store: "ConfigStore") -> None:
        ...


DefaultsHook = Union[DefaultsProvider, Callable[["ConfigStore"], None]]


def _saved_at_comment() -> str:
    now = datetime.now().astimezone()
    return "Date of saving: " + now.strftime("%a %b %d %H:%M:%S %Z %Y")


class ConfigStore:
    """
    Store de configuração em dois níveis (defaults + runtime).

    Pode ser usado por herança (sobrescrevendo `populate_defaults`) ou por
    composição (injetando um `DefaultsProvider` ou um callable).

    O nome do owner, que nomeia os arquivos, é resolvido nesta ordem:
        - `owner_name` explícito
        - nome do provider (`__name__` ou nome do tipo)
        - nome da subclasse concreta

    Args:
        defaults_provider: Provider (instância ou classe sem argumentos) ou
            callable `(store) -> None`.
        owner_name: Nome explícito do owner.
        file_extension: Extensão fixa dos arquivos (`.properties`, `.yaml`, `.yml`).
        strict: Levanta `InvalidStateError` em vez de apenas diagnosticar.

    Raises:
        UnsupportedStoreFormatError: Extensão sem codec.
        ValueError: Nome de owner inválido para arquivos.
    """

    def __init__(
        self,
        defaults_provider: Optional[DefaultsHook] = None,
        *,
        owner_name: Optional[str] = None,
        file_extension: str = DEFAULT_EXTENSION,
        strict: bool = False,
    ) -> None:
        self._owner_name = owner_name or self._derive_owner_name(defaults_provider)
        # classes de provider são instanciadas; o nome do owner continua sendo o da classe
        if isinstance(defaults_provider, type):
            defaults_provider = defaults_provider()
        self._provider = defaults_provider
        self._extension = file_extension
        self._codec = get_codec(file_extension)
        # valida o nome antes de qualquer I/O
        store_file_names(self._owner_name, self._extension)
        self.strict = strict

        self._state = StoreState.UNCONFIGURED
        self._defaults: Dict[str, str] = {}
        self._runtime: Optional[FallbackMapping] = None
        self._directory: Optional[Path] = None
        self.default_file_name: Optional[str] = None
        self.main_file_name: Optional[str] = None

        self.events: List[Dict[str, Any]] = []
        self.warnings: List[str] = []

    def _derive_owner_name(self, provider: Optional[DefaultsHook]) -> str:
        if provider is None:
            return type(self).__name__
        name = getattr(provider, "__name__", None) or type(provider).__name__
        if name == "<lambda>":
            raise ValueError("Providers lambda não têm nome estável; informe owner_name explicitamente")
        return name

    # -----------------------------
    # Estado e acessores read-only
    # -----------------------------
    @property
    def owner_name(self) -> str:
        return self._owner_name

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def modifiable(self) -> bool:
        return self._state is StoreState.LOADED

    @property
    def default_values(self) -> Dict[str, str]:
        return dict(self._defaults)

    @property
    def runtime_values(self) -> Optional[FallbackMapping]:
        return self._runtime

    @property
    def default_file_path(self) -> Optional[Path]:
        if self._directory is None or self.default_file_name is None:
            return None
        return self._directory / self.default_file_name

    @property
    def main_file_path(self) -> Optional[Path]:
        if self._directory is None or self.main_file_name is None:
            return None
        return self._directory / self.main_file_name

    def storage_directory(self) -> Optional[Path]:
        return self._directory

    # -----------------------------
    # Diagnósticos
    # -----------------------------
    def _record(self, *, level: str, message: str, **extra: Any) -> None:
        event = {
            "owner": self._owner_name,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)
        logger.log(logging.getLevelName(level), "%s: %s", self._owner_name, message)

    def _warn(self, message: str, **extra: Any) -> None:
        self.warnings.append(message)
        self._record(level="WARNING", message=message, **extra)

    def _reject(self, error: InvalidStateError, **extra: Any) -> None:
        if self.strict:
            raise error
        self._warn(str(error), error_type=type(error).__name__, **extra)

    @staticmethod
    def _check_entry(key: str, value: str) -> None:
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError(
                f"Chaves e valores devem ser str, recebido: "
                f"{type(key).__name__} -> {type(value).__name__}"
            )

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    def initialize(self, storage_hint: Optional[str] = "") -> LoadReport:
        """
        Cria diretório e arquivos se necessário, persiste os defaults e carrega ambos os níveis.

        Args:
            storage_hint: Nome da aplicação; vazio usa `./cfg`.

        Returns:
            LoadReport: Resumo do carregamento, incluindo warnings não fatais.

        Raises:
            StorageIOError: Falha ao criar diretório/arquivos ou ao gravar defaults.
            NotImplementedError: Owner sem `populate_defaults` nem provider.
        """
        self._state = StoreState.BOOTSTRAPPING
        self._defaults = {}
        self._runtime = None

        self._directory = resolve_storage_directory(storage_hint)
        self.default_file_name, self.main_file_name = store_file_names(self._owner_name, self._extension)

        self.ensure_storage()
        self.populate_defaults()
        self.save_defaults()
        return self.load()

    def ensure_storage(self) -> None:
        """
        Cria o diretório e os arquivos ausentes; não altera o que já existe.

        Decisões arquiteturais:
            - O diretório é criado antes dos arquivos, com os diretórios pais
            - Cada arquivo é verificado e criado de forma independente
            - Um caminho ocupado por algo que não é arquivo regular é falha

        Raises:
            StorageIOError: Diretório ou arquivo não pôde ser criado.
            InvalidStateError: Chamado antes da resolução do diretório.
        """
        directory = self._directory
        if directory is None:
            raise InvalidStateError("Diretório de armazenamento não resolvido; use initialize()")

        if not directory.is_dir():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageIOError(e.errno, f"Falha ao criar diretório de configuração: {e.strerror or e}", str(directory)) from e
            self._record(level="DEBUG", message=f"Diretório criado: {directory}")

        for path in (self.default_file_path, self.main_file_path):
            if path.is_file():
                continue
            try:
                path.touch(exist_ok=False)
            except OSError as e:
                raise StorageIOError(e.errno, f"Falha ao criar arquivo de configuração: {e.strerror or e}", str(path)) from e
            self._record(level="DEBUG", message=f"Arquivo criado: {path}")

    def populate_defaults(self) -> None:
        """
        Declara os defaults do owner via `set_default`.

        Sobrescreva em subclasses ou injete um `DefaultsProvider`.

        Raises:
            NotImplementedError: Sem sobrescrita e sem provider.
        """
        provider = self._provider
        if provider is None:
            raise NotImplementedError(
                f"{type(self).__name__} deve sobrescrever populate_defaults() "
                f"ou receber um DefaultsProvider"
            )

        hook = getattr(provider, "populate_defaults", None)
        if callable(hook):
            hook(self)
        else:
            provider(self)

    def load(self) -> LoadReport:
        """
        Carrega defaults e runtime do disco e marca o store como LOADED.

        Falhas de leitura não interrompem o carregamento: geram warnings e
        o mapeamento afetado mantém o estado anterior à leitura.
        """
        if self._directory is None:
            raise InvalidStateError("Diretório de armazenamento não resolvido; use initialize()")

        first_warning = len(self.warnings)

        try:
            self._defaults.update(self._codec.read(self.default_file_path))
        except ReadError as e:
            self._warn(f"Falha ao carregar defaults: {e}", path=str(self.default_file_path))

        runtime = FallbackMapping(parent=self._defaults)
        try:
            runtime.update_own(self._codec.read(self.main_file_path))
        except ReadError as e:
            self._warn(f"Falha ao carregar valores principais: {e}", path=str(self.main_file_path))

        self._runtime = runtime
        self._state = StoreState.LOADED

        self._record(level="INFO", message=f"Loading properties from: {self._directory}")
        self._record(level="INFO", message=f"Default properties loaded: {len(self._defaults)}")
        self._record(level="INFO", message=f"Properties loaded: {len(runtime.own)}")

        return LoadReport(
            storage_directory=self._directory,
            defaults_loaded=len(self._defaults),
            values_loaded=len(runtime.own),
            warnings=tuple(self.warnings[first_warning:]),
        )

    # -----------------------------
    # Mutadores
    # -----------------------------
    def set_default(self, key: str, value: str) -> None:
        """
        Define um default; permitido apenas antes de LOADED.

        Deve ser chamado de dentro de `populate_defaults()`. Depois do
        carregamento a mutação é rejeitada: registrada como warning, ou
        levantada como `InvalidStateError` em modo `strict`.

        Raises:
            TypeError: Chave ou valor que não são `str`.
        """
        self._check_entry(key, value)
        if not self._state.allows_defaults:
            self._reject(
                InvalidStateError(
                    "Defaults não podem ser alterados após initialize(); "
                    "declare-os em populate_defaults()"
                ),
                key=key,
            )
            return
        self._defaults[key] = value

    def set_value(self, key: str, value: str) -> None:
        """
        Define um valor de runtime; permitido apenas em LOADED.

        O valor só é persistido em um `save()` explícito. Antes do
        carregamento a mutação é rejeitada da mesma forma que em `set_default`.

        Raises:
            TypeError: Chave ou valor que não são `str`.
        """
        self._check_entry(key, value)
        if not self._state.allows_values or self._runtime is None:
            self._reject(
                InvalidStateError("Store não inicializado; use initialize() antes de alterar valores"),
                key=key,
            )
            return
        self._runtime.set(key, value)

    # -----------------------------
    # Leitura
    # -----------------------------
    def get(self, key: str) -> str:
        """
        Valor visível no runtime (próprio ou default), ou `""` se ausente.

        Nunca levanta exceção: antes de LOADED, ou para chaves que não são
        `str`, o retorno é `""`.
        """
        if self._runtime is None or not isinstance(key, str):
            return ""
        value = self._runtime.lookup(key)
        return "" if value is None else value

    def snapshot(self) -> Dict[str, str]:
        """Visão efetiva (defaults sobrescritos pelo runtime) como um novo dicionário."""
        if self._runtime is None:
            return {}
        return dict(self._runtime)

    # -----------------------------
    # Persistência
    # -----------------------------
    def save_defaults(self) -> None:
        """
        Regrava o arquivo de defaults com o conteúdo em memória.

        Chamado uma vez por `initialize()`, entre `populate_defaults()` e
        `load()`. O cabeçalho traz o nome do owner e a data da gravação.

        Raises:
            StorageIOError: Falha ao abrir ou gravar o arquivo.
        """
        path = self.default_file_path
        if path is None:
            raise InvalidStateError("Diretório de armazenamento não resolvido; use initialize()")
        self._codec.write(path, self._defaults, comments=[self._owner_name, _saved_at_comment()])
        self._record(level="DEBUG", message=f"Defaults gravados: {path}", count=len(self._defaults))

    def save(self) -> None:
        """
        Grava as entradas próprias do runtime no arquivo principal.

        Valores herdados dos defaults não são duplicados no arquivo.

        Raises:
            StorageIOError: Falha ao abrir ou gravar o arquivo.
            InvalidStateError: Store ainda não carregado.
        """
        if self._runtime is None or self._state is not StoreState.LOADED:
            raise InvalidStateError("Nada a salvar: store não carregado; use initialize() antes de save()")
        path = self.main_file_path
        own = self._runtime.own
        self._codec.write(path, own, comments=[_saved_at_comment()])
        self._record(level="DEBUG", message=f"Valores gravados: {path}", count=len(own))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(owner={self._owner_name!r}, state={self._state.value!r}, "
            f"directory={str(self._directory) if self._directory else None!r})"
        )
