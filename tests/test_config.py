from pathlib import Path

import config


def _write_config(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def test_load_config_reads_toml_sections(config_path):
    _write_config(
        config_path,
        "[scheduler]\nfuzz = false\nseed = 3\n\n[session]\nnew_card_cap = 5\nreview_cap = 50\nrequeue_lapsed = true\n",
    )

    loaded = config.load_config()

    assert loaded["scheduler"] == {"fuzz": False, "seed": 3}
    assert loaded["session"]["new_card_cap"] == 5
    assert loaded["session"]["review_cap"] == 50
    assert loaded["session"]["requeue_lapsed"] is True
    assert loaded["session"]["retention_minutes"] == config.DEFAULT_RETENTION_MINUTES
    assert loaded["logging"]["level"] == "INFO"


def test_load_config_defaults_when_sections_missing(config_path):
    _write_config(config_path, "")

    loaded = config.load_config()

    assert loaded["scheduler"] == {"fuzz": True, "seed": None}
    assert loaded["session"]["new_card_cap"] == config.DEFAULT_NEW_CARD_CAP
    assert loaded["session"]["review_cap"] is None
    assert loaded["session"]["requeue_lapsed"] is False


def test_environment_overrides_file(config_path, monkeypatch):
    _write_config(config_path, "[session]\nnew_card_cap = 5\n\n[logging]\nlevel = \"info\"\n")
    monkeypatch.setenv("SESSION_NEW_CARD_CAP", "12")
    monkeypatch.setenv("SCHEDULER_FUZZ", "false")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    loaded = config.load_config()

    assert loaded["session"]["new_card_cap"] == 12
    assert loaded["scheduler"]["fuzz"] is False
    assert loaded["logging"]["level"] == "WARNING"
    assert config.get_config_value("session", "new_card_cap") == 12


def test_example_config_copied_on_first_run(tmp_path, monkeypatch):
    config_dir = tmp_path / "fresh"
    config_path = config_dir / "config.toml"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    for name in ("SCHEDULER_FUZZ", "SCHEDULER_SEED", "SESSION_NEW_CARD_CAP", "SESSION_REVIEW_CAP"):
        monkeypatch.delenv(name, raising=False)

    loaded = config.load_config()

    assert config_path.exists()
    assert loaded["scheduler"]["fuzz"] is True
    assert loaded["session"]["new_card_cap"] == 20
