import pytest

from pomodoro.data.storage import Storage


def test_init_db_creates_file(tmp_path) -> None:
    db = tmp_path / "nested" / "pomodoro.db"
    storage = Storage(db)
    storage.init_db()
    storage.init_db()
    assert db.exists()


def test_get_set_delete(tmp_path) -> None:
    storage = Storage(tmp_path / "pomodoro.db")
    storage.init_db()

    assert storage.get("pomodoro-background") is None
    assert storage.get("missing", "x") == "x"

    storage.set("pomodoro-background", "backgrounds/preset_2.webp")
    assert storage.get("pomodoro-background") == "backgrounds/preset_2.webp"

    storage.set("pomodoro-background", "data:image/png;base64,AAAA")
    assert storage.get("pomodoro-background") == "data:image/png;base64,AAAA"

    storage.delete("pomodoro-background")
    storage.delete("pomodoro-background")
    assert storage.get("pomodoro-background") is None


def test_values_survive_reopen(tmp_path) -> None:
    path = tmp_path / "pomodoro.db"
    first = Storage(path)
    first.init_db()
    first.set("b", "2")
    first.set("a", "1")

    again = Storage(path)
    again.init_db()
    assert again.get("a") == "1"
    assert again.keys() == ["a", "b"]


def test_set_rejects_non_string(tmp_path) -> None:
    storage = Storage(tmp_path / "pomodoro.db")
    storage.init_db()

    with pytest.raises(ValueError):
        storage.set("volume", 3)
    assert storage.get("volume") is None
