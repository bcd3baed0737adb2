# tests/core/store/test_store_persistence.py
"""
Testes de persistência do ConfigStore.

Os testes asseguram que:
- `save()` grava apenas as entradas próprias do runtime
- valores salvos sobrevivem a uma nova instância (round-trip)
- o bootstrap é não destrutivo para arquivos existentes
- defaults são regravados a cada inicialização, com comentário de data
- falhas de leitura em `load()` são warnings não fatais
- falhas de escrita propagam como `StorageIOError` (um `IOError`)

Limites explícitos:
    - Não valida escrita atômica (fora do escopo)
    - Não valida acesso concorrente
"""

import pytest

from tiered_props import ConfigStore, InvalidStateError, ReadError, StorageIOError, StoreState
from tiered_props.core.store.codec import PropertiesCodec


def test_widget_scenario(workdir, Widget):
    store = Widget()
    store.initialize("")
    main_file = workdir / "cfg" / "Widget_main.properties"

    assert store.get("color") == "red"
    store.set_value("color", "blue")
    assert store.get("color") == "blue"

    store.save()

    assert "color=blue" in main_file.read_text(encoding="utf-8").splitlines()

    fresh = Widget()
    fresh.initialize("")
    assert fresh.get("color") == "blue"


def test_round_trip_with_hint(user_data_home, Widget):
    store = Widget()
    store.initialize("Acme")
    store.set_value("A", "1")
    store.save()

    fresh = Widget()
    fresh.initialize("Acme")

    assert fresh.get("A") == "1"
    assert fresh.storage_directory() == store.storage_directory()
    assert str(user_data_home) in str(fresh.storage_directory())


def test_save_writes_only_own_entries(workdir, Widget):
    store = Widget()
    store.initialize()
    store.set_value("color", "blue")
    store.save()

    saved = PropertiesCodec().read(store.main_file_path)
    assert saved == {"color": "blue"}


def test_save_adds_timestamp_comment(workdir, Widget):
    store = Widget()
    store.initialize()
    store.save()

    first_line = store.main_file_path.read_text(encoding="utf-8").splitlines()[0]
    assert first_line.startswith("#Date of saving: ")


def test_defaults_file_is_rewritten_every_initialize(workdir, Widget):
    cfg = workdir / "cfg"
    cfg.mkdir()
    (cfg / "Widget_def.properties").write_text("color=purple\nstale=1\n", encoding="utf-8")

    store = Widget()
    store.initialize()

    text = (cfg / "Widget_def.properties").read_text(encoding="utf-8")
    lines = text.splitlines()
    assert lines[0] == "#Widget"
    assert lines[1].startswith("#Date of saving: ")
    assert "color=red" in lines
    assert "stale=1" not in lines
    assert store.get("color") == "red"
    assert store.get("stale") == ""


def test_bootstrap_preserves_existing_main_file(workdir, Widget):
    cfg = workdir / "cfg"
    cfg.mkdir()
    (cfg / "Widget_main.properties").write_text("color=green\n", encoding="utf-8")

    first = Widget()
    first.initialize()
    second = Widget()
    second.initialize()

    assert first.get("color") == "green"
    assert second.get("color") == "green"
    assert (cfg / "Widget_main.properties").read_text(encoding="utf-8") == "color=green\n"


def test_reinitialize_same_instance_starts_fresh(workdir, Widget):
    store = Widget()
    store.initialize()
    store.set_value("color", "blue")

    report = store.initialize()

    assert store.get("color") == "red"
    assert report.values_loaded == 0


def test_unreadable_main_file_is_non_fatal(workdir, Widget):
    cfg = workdir / "cfg"
    cfg.mkdir()
    (cfg / "Widget_main.properties").write_bytes(b"color=\xff\xfe\n")

    store = Widget()
    report = store.initialize()

    assert not report.ok
    assert len(report.warnings) == 1
    assert isinstance(report.warnings, tuple)
    assert tuple(store.warnings) == report.warnings
    assert store.get("color") == "red"
    assert store.modifiable


def test_unreadable_defaults_file_keeps_in_memory_defaults(workdir, Widget, monkeypatch):
    store = Widget()
    original_read = PropertiesCodec.read

    def failing_read(self, path):
        if path.name.endswith("_def.properties"):
            raise ReadError(f"falha simulada em {path}")
        return original_read(self, path)

    monkeypatch.setattr(PropertiesCodec, "read", failing_read)

    report = store.initialize()

    assert len(report.warnings) == 1
    assert "defaults" in report.warnings[0]
    assert store.get("color") == "red"


def test_save_before_initialize_raises(workdir, Widget):
    with pytest.raises(InvalidStateError):
        Widget().save()


def test_directory_creation_failure_propagates(workdir, Widget):
    # `cfg` existe como arquivo: o diretório não pode ser criado
    (workdir / "cfg").write_text("", encoding="utf-8")

    with pytest.raises(StorageIOError) as exc:
        Widget().initialize("")
    assert isinstance(exc.value, IOError)


def test_save_failure_propagates(workdir, Widget):
    store = Widget()
    store.initialize()
    for path in (store.main_file_path, store.default_file_path):
        path.unlink()
    store.storage_directory().rmdir()

    with pytest.raises(StorageIOError) as exc:
        store.save()
    assert isinstance(exc.value, IOError)


def test_yaml_store_round_trip(workdir):
    class Gadget(ConfigStore):
        def populate_defaults(self):
            self.set_default("enabled", "yes")
            self.set_default("count", "3")

    store = Gadget(file_extension=".yaml")
    store.initialize()
    assert (workdir / "cfg" / "Gadget_def.yaml").is_file()
    assert store.get("enabled") == "yes"

    store.set_value("count", "5")
    store.save()

    fresh = Gadget(file_extension=".yaml")
    fresh.initialize()
    assert fresh.get("count") == "5"
    assert fresh.get("enabled") == "yes"


def test_utf16_escaped_pair_survives_save(workdir, Widget):
    cfg = workdir / "cfg"
    cfg.mkdir()
    (cfg / "Widget_main.properties").write_text("smile=\\ud83d\\ude00\nkeep=1\n", encoding="utf-8")

    store = Widget()
    store.initialize()
    assert store.get("smile") == "\U0001F600"

    store.save()

    fresh = Widget()
    fresh.initialize()
    assert fresh.get("smile") == "\U0001F600"
    assert fresh.get("keep") == "1"


def test_lone_surrogate_value_does_not_wipe_main_file(workdir, Widget):
    store = Widget()
    store.initialize()
    store.set_value("keep", "1")
    store.save()

    store.set_value("emoji", "\ud83d")
    store.save()

    fresh = Widget()
    fresh.initialize()
    assert fresh.get("keep") == "1"
    assert fresh.get("emoji") == "\ud83d"


@pytest.mark.parametrize("separator", ["\x85", "\u2028", "\u2029"])
def test_unicode_line_separator_value_round_trip(workdir, Widget, separator):
    store = Widget()
    store.initialize()
    store.set_value("k", f"a{separator}b")
    store.save()

    fresh = Widget()
    fresh.initialize()
    assert fresh.get("k") == f"a{separator}b"
    assert fresh.runtime_values.own == {"k": f"a{separator}b"}


def test_main_file_creation_failure_propagates(workdir, Widget):
    # um diretório ocupa o caminho do arquivo principal
    (workdir / "cfg" / "Widget_main.properties").mkdir(parents=True)

    with pytest.raises(StorageIOError) as exc:
        Widget().initialize("")
    assert isinstance(exc.value, IOError)


def test_default_file_write_failure_propagates(workdir):
    class Vanishing(ConfigStore):
        def populate_defaults(self):
            self.set_default("color", "red")
            # o diretório some entre o bootstrap e a gravação dos defaults
            for path in (self.default_file_path, self.main_file_path):
                path.unlink()
            self.storage_directory().rmdir()

    store = Vanishing()
    with pytest.raises(StorageIOError) as exc:
        store.initialize()

    assert isinstance(exc.value, IOError)
    assert store.state is StoreState.BOOTSTRAPPING
