import json

from notewhisper import config
from notewhisper.models import Settings


def test_load_default_config_when_missing(tmp_path, monkeypatch):
    cfg_path = tmp_path / "config.json"
    monkeypatch.setattr(config, "CONFIG_PATH", cfg_path)

    cfg = config.load_config()
    assert isinstance(cfg, Settings)
    assert cfg.model == "whisper-1"
    assert cfg.api_key == ""


def test_save_and_load_config(tmp_path, monkeypatch):
    cfg_path = tmp_path / "config.json"
    monkeypatch.setattr(config, "CONFIG_PATH", cfg_path)

    cfg = Settings(api_key="sk-123", language="pl")
    config.save_config(cfg)

    loaded = config.load_config()
    assert loaded.api_key == "sk-123"
    assert loaded.language == "pl"


def test_stored_keys_merge_over_defaults(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(json.dumps({"prompt": "Meeting notes", "legacyOption": True}))

    loaded = config.load_config(cfg_path)
    assert loaded.prompt == "Meeting notes"
    assert loaded.model == "whisper-1"
    assert loaded.attachments_folder == "Attachments"


def test_invalid_json_raises_config_error(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("{not json")

    try:
        config.load_config(cfg_path)
    except config.ConfigError:
        pass
    else:
        raise AssertionError("Expected ConfigError for a broken file")


def test_update_config_validates_keys(tmp_path, monkeypatch):
    cfg_path = tmp_path / "config.json"
    monkeypatch.setattr(config, "CONFIG_PATH", cfg_path)

    config.update_config(scan_folder="Journal")
    loaded = config.load_config()
    assert loaded.scan_folder == "Journal"

    try:
        config.update_config(unknown="value")
    except config.ConfigError:
        pass
    else:
        raise AssertionError("Expected ConfigError for invalid key")
