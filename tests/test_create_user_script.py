from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

from blog.database import Database

ROOT = Path(__file__).resolve().parents[1]


def _load_script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("create_user_script", ROOT / "scripts" / "create_user.py")
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def script(monkeypatch) -> ModuleType:
    monkeypatch.delenv("BLOG_CONFIG", raising=False)
    monkeypatch.delenv("BLOG_DB_PATH", raising=False)
    monkeypatch.delenv("BLOG_BCRYPT_ROUNDS", raising=False)
    module = _load_script()
    monkeypatch.setattr(module.getpass, "getpass", lambda prompt="": "pw123")
    return module


def test_creates_user_and_rejects_duplicates(tmp_path: Path, script: ModuleType, capsys) -> None:
    db_path = tmp_path / "blog.sqlite3"
    argv = ["Ann", "Ann@X.com", "--db", str(db_path)]

    assert script.main(argv) == 0
    assert "Registered #1 Ann <ann@x.com>" in capsys.readouterr().out
    assert Database(db_path).authenticate_user("ann@x.com", "pw123") is not None

    assert script.main(argv) == 1
    assert "User already exists" in capsys.readouterr().err


@pytest.mark.parametrize("name", ["", "   "])
def test_blank_name_is_rejected(tmp_path: Path, script: ModuleType, capsys, name: str) -> None:
    db_path = tmp_path / "blog.sqlite3"

    assert script.main([name, "ann@x.com", "--db", str(db_path)]) == 1
    assert "Please enter all fields" in capsys.readouterr().err
    assert Database(db_path).list_users() == []


def test_database_location_comes_from_config_file(
    tmp_path: Path, script: ModuleType, monkeypatch, capsys
) -> None:
    config = tmp_path / "blog.yaml"
    config.write_text("database_path: store/blog.sqlite3\nbcrypt_rounds: 4\n", encoding="utf-8")
    monkeypatch.setenv("BLOG_CONFIG", str(config))

    assert script.main(["Ann", "ann@x.com"]) == 0

    expected = (tmp_path / "store" / "blog.sqlite3").resolve()
    assert str(expected) in capsys.readouterr().out
    user = Database(expected).authenticate_user("ann@x.com", "pw123")
    assert user is not None and user.name == "Ann"


def test_gives_up_after_three_mismatched_passwords(script: ModuleType, monkeypatch) -> None:
    answers = iter(["a", "b"] * 3)
    monkeypatch.setattr(script.getpass, "getpass", lambda prompt="": next(answers))

    with pytest.raises(SystemExit):
        script.read_password()
