from __future__ import annotations

import pytest

from archguide.errors import PersistenceDisabled
from archguide.state_store import PersistentStore


@pytest.fixture
def store(tmp_path):
    s = PersistentStore(tmp_path / ".archguide")
    assert s.set_enabled(True)
    return s


def test_disabled_until_directory_exists(tmp_path):
    s = PersistentStore(tmp_path / ".archguide")
    assert not s.enabled
    assert s.set_enabled(True)
    assert s.enabled
    # Idempotent.
    assert s.set_enabled(True)
    assert s.enabled


def test_set_enabled_false_removes_everything(store):
    store.mark_complete("111_readme")
    store.config_set("text_editor", "vim")
    assert store.set_enabled(False)
    assert not store.persist_dir.exists()
    assert store.set_enabled(False)


def test_cannot_create_directory_stays_disabled(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    s = PersistentStore(blocker / ".archguide")
    assert s.set_enabled(True) is False
    assert not s.enabled
    assert s.mark_complete("x") is False
    assert s.is_complete("x") is False
    assert s.config_get("x") is None


def test_mark_complete_appends_and_reads_as_set(store):
    assert store.mark_complete("211_set_keyboard_layout")
    assert store.mark_complete("211_set_keyboard_layout")
    assert store.mark_complete("251_partition_disks")

    lines = store.progress_path.read_text(encoding="utf-8").splitlines()
    assert lines == ["211_set_keyboard_layout", "211_set_keyboard_layout", "251_partition_disks"]
    assert store.completed() == {"211_set_keyboard_layout", "251_partition_disks"}
    assert store.is_complete("251_partition_disks")
    assert not store.is_complete("252_format_partitions")


def test_is_complete_matches_whole_lines_only(store):
    store.mark_complete("251_partition_disks_extra")
    assert not store.is_complete("251_partition_disks")


def test_mark_complete_when_disabled_writes_nothing(tmp_path):
    s = PersistentStore(tmp_path / ".archguide")
    assert s.mark_complete("111_readme") is False
    assert not (tmp_path / ".archguide").exists()


def test_config_last_write_wins_and_history_is_kept(store):
    store.config_set("text_editor", "nano")
    store.config_set("keyboard_layout", "de-latin1")
    store.config_set("text_editor", "vim")

    assert store.config_get("text_editor") == "vim"
    assert store.config_get("keyboard_layout") == "de-latin1"
    assert store.config_path.read_text(encoding="utf-8").splitlines() == [
        "text_editor nano",
        "keyboard_layout de-latin1",
        "text_editor vim",
    ]


def test_config_get_unset_key(store):
    assert store.config_get("text_editor") is None


def test_config_value_is_rest_of_line(store):
    store.config_path.write_text("extra_pkgs   git  base-devel\n\nlonely\n", encoding="utf-8")
    assert store.config_get("extra_pkgs") == "git  base-devel"
    assert store.config_get("lonely") == ""


def test_config_set_when_disabled_raises(tmp_path):
    s = PersistentStore(tmp_path / ".archguide")
    with pytest.raises(PersistenceDisabled):
        s.config_set("text_editor", "nano")


@pytest.mark.parametrize("key,value", [("", "x"), ("two words", "x"), ("key", "multi\nline")])
def test_config_set_rejects_unparseable_entries(store, key, value):
    with pytest.raises(ValueError):
        store.config_set(key, value)
    assert not store.config_path.exists()


def test_new_store_instance_sees_previous_writes(store):
    store.mark_complete("331_chroot")
    store.config_set("keyboard_layout", "fr")

    again = PersistentStore(store.persist_dir)
    assert again.is_complete("331_chroot")
    assert again.config_get("keyboard_layout") == "fr"


def test_unwritable_completion_log_does_not_raise(store):
    store.progress_path.mkdir()
    assert store.mark_complete("211_set_keyboard_layout") is False
    assert not store.is_complete("211_set_keyboard_layout")


def test_unwritable_config_reads_as_not_remembered(store):
    store.config_path.mkdir()
    with pytest.raises(PersistenceDisabled):
        store.config_set("text_editor", "nano")


def test_stray_bytes_in_hand_edited_files_are_tolerated(store):
    store.progress_path.write_bytes(b"211_set_keyboard_layout\n\xff\xfe\n")
    store.config_path.write_bytes(b"text_editor vim\n\xff junk\n")
    assert store.is_complete("211_set_keyboard_layout")
    assert store.config_get("text_editor") == "vim"


def test_config_values_round_trip_without_surrounding_space(store):
    store.config_set("extra_pkgs", "  git base-devel ")
    assert store.config_get("extra_pkgs") == "git base-devel"


def test_package_names_are_replaced_whole(store):
    store.write_package_names("base\nlinux\n")
    store.write_package_names("base\nlinux\nlinux-lts\n")
    assert store.package_names_path.read_text(encoding="utf-8") == "base\nlinux\nlinux-lts\n"
    assert list(store.persist_dir.iterdir()) == [store.package_names_path]


def test_package_names_need_persistence(tmp_path):
    s = PersistentStore(tmp_path / ".archguide")
    with pytest.raises(PersistenceDisabled):
        s.write_package_names("base\n")
