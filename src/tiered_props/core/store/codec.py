# src/tiered_props/core/store/codec.py
"""
Codecs de arquivo texto plano chave-valor do ConfigStore.

Formatos suportados (v1):
    - `.properties` — formato clássico de properties (`key=value`,
      `key: value`, comentários `#`/`!`, continuação com `\\`)
    - `.yaml` / `.yml` — mapeamento YAML plano (`key: value`, comentários `#`)

Decisões arquiteturais:
    - O formato é escolhido pela extensão, uma única vez, na construção do store
    - Todo valor lido é string; estruturas aninhadas são erro de leitura
    - Falhas de leitura viram `ReadError`; falhas de escrita viram `StorageIOError`
    - Chaves são gravadas em ordem alfabética (diffs estáveis)

Limites explícitos:
    - Não realiza escrita atômica
    - Não preserva comentários ou ordem do arquivo original ao regravar
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Protocol

import yaml  # PyYAML

from .errors import ReadError, StorageIOError, UnsupportedStoreFormatError


class StoreCodec(Protocol):
    """Contrato mínimo de um codec: ler e gravar um mapa `str -> str`."""

    def read(self, path: Path) -> Dict[str, str]:
        ...

    def write(self, path: Path, values: Mapping[str, str], comments: Iterable[str] = ()) -> None:
        ...


def _write_text(path: Path, text: str) -> None:
    # codifica antes de abrir: o arquivo existente só é truncado com o conteúdo pronto
    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise StorageIOError(None, f"Conteúdo não codificável em UTF-8: {e.reason}", str(path)) from e

    try:
        with path.open("wb") as f:
            f.write(data)
    except OSError as e:
        raise StorageIOError(e.errno, f"Falha ao gravar arquivo de configuração: {e.strerror or e}", str(path)) from e


def _read_text(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(f"Falha ao ler arquivo de configuração {path}: {e}") from e


# -----------------------------
# .properties
# -----------------------------
_SEPARATORS = "=:"
_WHITESPACE = " \t\f"
_ESCAPES_IN = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPES_OUT = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f", "\\": "\\\\"}
# só \n, \r\n e \r terminam linha; NEL, LS e PS (U+0085, U+2028, U+2029) fazem parte do valor
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_UNICODE_LINE_BREAKS = {"\x85", "\u2028", "\u2029"}


def _ends_with_continuation(line: str) -> bool:
    backslashes = len(line) - len(line.rstrip("\\"))
    return backslashes % 2 == 1


def _logical_lines(text: str) -> Iterator[str]:
    pending = None
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if pending is None and (not line or line[0] in "#!"):
            continue
        if pending is not None:
            line = pending + line
        if _ends_with_continuation(line):
            pending = line[:-1]
            continue
        pending = None
        yield line
    if pending is not None:
        yield pending


def _parse_code_unit(text: str, start: int, path: Path) -> int:
    code = text[start:start + 4]
    if len(code) != 4:
        raise ReadError(f"Escape unicode malformado em {path}: \\u{code}")
    try:
        return int(code, 16)
    except ValueError:
        raise ReadError(f"Escape unicode malformado em {path}: \\u{code}") from None


def _unescape(text: str, path: Path) -> str:
    """
    Decodifica os escapes de uma chave ou valor de properties.

    Pares de surrogates escritos como `\\uD83D\\uDE00` (forma usada por
    escritores UTF-16) são combinados em um único code point. Um surrogate
    isolado é mantido como está.

    Raises:
        ReadError: Escape `\\u` com menos de quatro dígitos hexadecimais.
    """
    out: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\" or i + 1 >= len(text):
            out.append(ch)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u":
            unit = _parse_code_unit(text, i + 2, path)
            i += 6
            if 0xD800 <= unit <= 0xDBFF and text.startswith("\\u", i):
                low = _parse_code_unit(text, i + 2, path)
                if 0xDC00 <= low <= 0xDFFF:
                    unit = 0x10000 + ((unit - 0xD800) << 10) + (low - 0xDC00)
                    i += 6
            out.append(chr(unit))
            continue
        out.append(_ESCAPES_IN.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split_entry(line: str):
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _SEPARATORS or ch in _WHITESPACE:
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def _needs_unicode_escape(ch: str) -> bool:
    code = ord(ch)
    return (
        code < 0x20
        or code == 0x7F
        or ch in _UNICODE_LINE_BREAKS
        or 0xD800 <= code <= 0xDFFF
    )


def _escape(text: str, *, is_key: bool) -> str:
    out: List[str] = []
    for i, ch in enumerate(text):
        if ch in _ESCAPES_OUT:
            out.append(_ESCAPES_OUT[ch])
        elif ch == " " and (is_key or i == 0):
            out.append("\\ ")
        elif ch in "=:#!":
            out.append("\\" + ch)
        elif _needs_unicode_escape(ch):
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return "".join(out)


class PropertiesCodec:
    """Leitura e escrita do formato properties em UTF-8."""

    def read(self, path: Path) -> Dict[str, str]:
        """
        Lê um arquivo properties e retorna suas entradas.

        Regras de leitura:
            - Linhas terminam apenas em `\\n`, `\\r\\n` ou `\\r`
            - Linhas iniciadas por `#` ou `!` são comentários
            - Separador: o primeiro `=`, `:` ou espaço não escapado
            - `\\` no fim da linha continua a entrada na linha seguinte
            - Chaves repetidas: a última ocorrência vence

        Invariantes:
            - O retorno é sempre um dicionário `str -> str`
            - Nenhuma coerção de tipo é aplicada

        Raises:
            ReadError: Arquivo ausente, ilegível, fora de UTF-8 ou com escape malformado.
        """
        values: Dict[str, str] = {}
        for line in _logical_lines(_read_text(path)):
            key, value = _split_entry(line)
            values[_unescape(key, path)] = _unescape(value, path)
        return values

    def write(self, path: Path, values: Mapping[str, str], comments: Iterable[str] = ()) -> None:
        """
        Grava as entradas em `path`, sobrescrevendo o arquivo.

        Decisões arquiteturais:
            - Comentários vão no topo, um por linha, prefixados por `#`
            - Chaves em ordem alfabética
            - Caracteres que quebrariam a releitura (separadores, quebras de
              linha unicode, surrogates isolados) são escapados

        Limites explícitos:
            - Não é atômico: uma falha no meio da escrita pode deixar o
              arquivo incompleto

        Raises:
            StorageIOError: Falha ao abrir ou gravar o arquivo.
        """
        lines = [f"#{c}" for c in comments]
        for key in sorted(values):
            lines.append(f"{_escape(key, is_key=True)}={_escape(values[key], is_key=False)}")
        _write_text(path, "\n".join(lines) + "\n")



# -----------------------------
# .yaml / .yml
# -----------------------------
class FlatYamlCodec:
    """
    Mapeamento YAML plano.

    A leitura usa `yaml.BaseLoader`, que mantém todo escalar como string
    (`yes`, `1` e `null` não são convertidos).
    """

    def read(self, path: Path) -> Dict[str, str]:
        """
        Lê um mapeamento YAML plano.

        Invariantes:
            - Arquivo vazio equivale a mapeamento vazio
            - Todo valor retornado é string

        Raises:
            ReadError: YAML inválido, raiz que não é mapeamento ou valor aninhado.
        """
        text = _read_text(path)
        try:
            data = yaml.load(text, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            raise ReadError(f"YAML inválido em {path}: {e}") from e

        if data is None or data == "":
            return {}

        if not isinstance(data, dict):
            raise ReadError(f"Raiz do arquivo deve ser um mapeamento, recebido: {type(data).__name__} ({path})")

        for key, value in data.items():
            if not isinstance(value, str):
                raise ReadError(f"Valor da chave '{key}' deve ser escalar, recebido: {type(value).__name__} ({path})")

        return dict(data)

    def write(self, path: Path, values: Mapping[str, str], comments: Iterable[str] = ()) -> None:
        """Grava o mapeamento com `yaml.safe_dump`, precedido dos comentários `# ...`."""
        header = "".join(f"# {c}\n" for c in comments)
        body = yaml.safe_dump(
            dict(values),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=True,
        )
        _write_text(path, header + body)


_CODECS: Dict[str, StoreCodec] = {
    ".properties": PropertiesCodec(),
    ".yaml": FlatYamlCodec(),
    ".yml": FlatYamlCodec(),
}


def get_codec(extension: str) -> StoreCodec:
    """
    Retorna o codec registrado para a extensão informada.

    Raises:
        UnsupportedStoreFormatError: Se a extensão não tiver codec.
    """
    codec = _CODECS.get(extension.lower())
    if codec is None:
        raise UnsupportedStoreFormatError(f"Formato não suportado: {extension}")
    return codec
