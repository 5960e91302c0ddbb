from pathlib import Path

import pytest

import config
from db import database
from utils import study

CONFIG_ENV_VARS = [
    "SCHEDULER_FUZZ",
    "SCHEDULER_SEED",
    "SESSION_NEW_CARD_CAP",
    "SESSION_REVIEW_CAP",
    "SESSION_REQUEUE_LAPSED",
    "SESSION_RETENTION_MINUTES",
    "LOG_LEVEL",
]


def write_test_config(config_path: Path, new_card_cap: int = 20, requeue_lapsed: bool = False) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[scheduler]",
                "fuzz = false",
                "seed = 7",
                "",
                "[session]",
                f"new_card_cap = {new_card_cap}",
                f"requeue_lapsed = {'true' if requeue_lapsed else 'false'}",
                "retention_minutes = 120",
                "",
                "[logging]",
                "level = \"DEBUG\"",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    config_dir = tmp_path / ".recallprep"
    config_dir.mkdir()
    path = config_dir / "config.toml"
    write_test_config(path)

    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", path)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "recallprep.db")
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return path


@pytest.fixture
def conn(config_path):
    database.init_db()
    study.clear_sessions()
    with database.get_conn() as connection:
        yield connection
    study.clear_sessions()


@pytest.fixture
def deck_id(conn):
    cursor = conn.cursor()
    cursor.execute("INSERT INTO decks (name, subject) VALUES (?, ?)", ("Penal Code", "law"))
    conn.commit()
    return cursor.lastrowid
