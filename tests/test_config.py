from studydeck import config


def test_defaults_without_file(tmp_path, monkeypatch):
    for var in ("STUDYDECK_DB_PATH", "STUDYDECK_LOG_LEVEL", "STUDYDECK_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    cfg = config.load_config(tmp_path / "missing.toml")
    assert cfg["database"]["path"] == config.DEFAULT_DB_PATH
    assert cfg["logging"]["level"] == "WARNING"
    assert cfg["logging"]["file"] is None


def test_file_values(tmp_path, monkeypatch):
    for var in ("STUDYDECK_DB_PATH", "STUDYDECK_LOG_LEVEL", "STUDYDECK_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    path = tmp_path / "config.toml"
    path.write_text('[database]\npath = "/tmp/cards.db"\n\n[logging]\nlevel = "debug"\n')
    cfg = config.load_config(path)
    assert cfg["database"]["path"] == "/tmp/cards.db"
    assert cfg["logging"]["level"] == "DEBUG"


def test_environment_overrides_file(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    path = tmp_path / "config.toml"
    path.write_text('[database]\npath = "/tmp/cards.db"\n')
    monkeypatch.setenv("STUDYDECK_DB_PATH", str(tmp_path / "env.db"))
    monkeypatch.setenv("STUDYDECK_LOG_LEVEL", "info")
    cfg = config.load_config(path)
    assert cfg["database"]["path"] == str(tmp_path / "env.db")
    assert cfg["logging"]["level"] == "INFO"
