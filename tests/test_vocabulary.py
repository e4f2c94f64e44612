import pytest

from conftest import entry
from latinquiz.config import settings
from latinquiz.errors import ImportFormatError, InvalidVocabularyEntry, UnknownHeadword
from latinquiz.vocabulary import (
    VocabularyManager,
    load_catalog,
    merge,
    parse_import_rows,
    read_import_csv,
)

CATALOG_SIZE = 72


def _active(manager: VocabularyManager) -> dict:
    return {e.headword: e.accepted_answers for e in manager.get_active_vocabulary()}


def test_builtin_catalog_loads() -> None:
    catalog = load_catalog()
    words = {e.headword: e.accepted_answers for e in catalog}
    assert len(catalog) == CATALOG_SIZE
    assert words["curare"] == ("verzorgen", "zorgen voor")
    assert words["a / ab"] == ("vanaf", "door")
    assert words["salutare"] == ("begroeten", "groeten", "(be)groeten")
    assert words["finire"] == ("beëindigen",)
    assert all(e.is_quizzable for e in catalog)


def test_custom_catalog_file(small_catalog) -> None:
    catalog = load_catalog(str(small_catalog))
    assert [e.headword for e in catalog] == ["curare", "homo", "via"]


def test_merge_applies_overlay() -> None:
    base = [entry("a", "1"), entry("b", "2"), entry("c", "3")]
    merged = merge(base, ["b"], {"c": ["drie"], "d": ["4"]})
    assert [(e.headword, e.accepted_answers) for e in merged] == [
        ("a", ("1",)),
        ("c", ("drie",)),
        ("d", ("4",)),
    ]


def test_merge_deduplicates_headwords() -> None:
    merged = merge([entry("a", "1"), entry("a", "2")], [], {})
    assert [e.accepted_answers for e in merged] == [("1",)]


def test_add_entry_splits_translations(vocab_manager) -> None:
    added = vocab_manager.add_entry(" aqua ", "water, nat ,")
    assert added.accepted_answers == ("water", "nat")
    assert _active(vocab_manager)["aqua"] == ("water", "nat")
    assert vocab_manager.counts() == {
        "standard": CATALOG_SIZE,
        "custom": 1,
        "total": CATALOG_SIZE + 1,
    }


def test_add_entry_rejects_empty_input(vocab_manager) -> None:
    for headword, translations in [("", "water"), ("aqua", " , "), ("  ", ["x"]), ("aqua", [])]:
        with pytest.raises(InvalidVocabularyEntry):
            vocab_manager.add_entry(headword, translations)
    assert len(vocab_manager.get_active_vocabulary()) == CATALOG_SIZE


def test_generation_tracks_mutations(vocab_manager) -> None:
    generation = vocab_manager.generation
    first = vocab_manager.get_active_vocabulary()
    assert vocab_manager.get_active_vocabulary() == first
    assert vocab_manager.generation == generation

    vocab_manager.add_entry("aqua", "water")
    assert vocab_manager.generation == generation + 1
    assert len(vocab_manager.get_active_vocabulary()) == len(first) + 1


def test_remove_and_restore_builtin(vocab_manager) -> None:
    vocab_manager.remove_entry("homo")
    assert "homo" not in _active(vocab_manager)
    assert vocab_manager.get_removed() == ["homo"]
    with pytest.raises(UnknownHeadword):
        vocab_manager.remove_entry("homo")

    vocab_manager.restore_entry("homo")
    assert _active(vocab_manager)["homo"] == ("mens", "man")
    with pytest.raises(UnknownHeadword):
        vocab_manager.restore_entry("homo")


def test_remove_unknown_word(vocab_manager) -> None:
    with pytest.raises(UnknownHeadword):
        vocab_manager.remove_entry("aqua")


def test_remove_custom_word(vocab_manager) -> None:
    vocab_manager.add_entry("aqua", "water")
    vocab_manager.remove_entry("aqua")
    assert "aqua" not in _active(vocab_manager)
    assert vocab_manager.get_removed() == []


def test_custom_entry_overrides_builtin(vocab_manager) -> None:
    vocab_manager.add_entry("curare", ["zorgen"])
    listing = {item.headword: item for item in vocab_manager.get_all_vocabulary()}
    assert listing["curare"].accepted_answers == ["zorgen"]
    assert listing["curare"].is_custom is True
    assert len(listing) == CATALOG_SIZE

    vocab_manager.remove_entry("curare")
    assert "curare" not in _active(vocab_manager)
    vocab_manager.restore_entry("curare")
    assert _active(vocab_manager)["curare"] == ("verzorgen", "zorgen voor")


def test_adding_a_removed_builtin_brings_it_back(vocab_manager) -> None:
    vocab_manager.remove_entry("via")
    vocab_manager.add_entry("via", "weg")
    assert _active(vocab_manager)["via"] == ("weg",)
    assert vocab_manager.get_removed() == []


def test_overrides_persist_in_store(store, vocab_manager) -> None:
    vocab_manager.add_entry("aqua", "water")
    vocab_manager.remove_entry("homo")
    fresh = VocabularyManager(store)
    assert "aqua" in _active(fresh)
    assert "homo" not in _active(fresh)


def test_corrupt_store_is_ignored(store) -> None:
    store.set(settings.CUSTOM_VOCAB_KEY, "{not json")
    store.set(settings.REMOVED_VOCAB_KEY, '{"homo": 1}')
    manager = VocabularyManager(store)
    assert len(manager.get_active_vocabulary()) == CATALOG_SIZE


def test_search(vocab_manager) -> None:
    assert [item.headword for item in vocab_manager.search("ZORG")] == ["curare"]
    assert [item.headword for item in vocab_manager.search("leeuw")] == ["leo"]
    assert vocab_manager.search("aqua") == []
    assert len(vocab_manager.search("  ")) == CATALOG_SIZE


def test_parse_import_rows() -> None:
    rows = [
        ["Latijn", "Nederlands"],
        ["aqua", "water"],
        ["homo", "mens, man"],
        ["via", "weg;straat/pad"],
        ["", ""],
        ["leeg", ""],
        ["alleen"],
    ]
    entries = parse_import_rows(rows)
    assert [(e.headword, e.accepted_answers) for e in entries] == [
        ("aqua", ("water",)),
        ("homo", ("mens", "man")),
        ("via", ("weg", "straat", "pad")),
    ]


def test_header_only_skipped_on_first_row() -> None:
    entries = parse_import_rows([["aqua", "water"], ["latin", "dutch"]])
    assert [e.headword for e in entries] == ["aqua", "latin"]


def test_read_import_csv() -> None:
    data = 'latin,dutch\naqua,water\nhomo,"mens, man"\n'.encode("utf-8")
    entries = read_import_csv(data)
    assert [(e.headword, e.accepted_answers) for e in entries] == [
        ("aqua", ("water",)),
        ("homo", ("mens", "man")),
    ]


def test_read_import_csv_ignores_extra_columns() -> None:
    entries = read_import_csv(b"Latijn,Nederlands,Hoofdstuk\nhomo,mens,8\nvia,\"weg; straat\",10\n")
    assert [(e.headword, e.accepted_answers) for e in entries] == [
        ("homo", ("mens",)),
        ("via", ("weg", "straat")),
    ]


def test_parse_import_rows_reads_only_second_column() -> None:
    entries = parse_import_rows([["homo", "mens/man", "8"], ["aqua", "", "water"]])
    assert [(e.headword, e.accepted_answers) for e in entries] == [("homo", ("mens", "man"))]


def test_imported_extra_column_is_not_an_answer(controller) -> None:
    controller.start(read_import_csv(b"Latijn,Nederlands,Hoofdstuk\nhomo,mens,8\n"))
    assert controller.submit("8").kind == "incorrect_with_hint"
    assert controller.hint.fragment == "me"
    assert controller.submit("8").kind == "incorrect_final"


def test_read_import_csv_rejects_useless_files() -> None:
    with pytest.raises(ImportFormatError):
        read_import_csv(b"")
    with pytest.raises(ImportFormatError):
        read_import_csv(b"latijn,nederlands\n")


def test_import_entries(vocab_manager) -> None:
    vocab_manager.remove_entry("homo")
    count = vocab_manager.import_entries(
        [entry("aqua", "water"), entry("homo", "mens"), entry("", "x")]
    )
    assert count == 2
    active = _active(vocab_manager)
    assert active["aqua"] == ("water",)
    assert active["homo"] == ("mens",)
