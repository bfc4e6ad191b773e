import json
from pathlib import Path

from leavepush.config import Settings, _load_config_file


def test_settings_reads_data_dir_config_json(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text(
        json.dumps(
            {
                "port": 8080,
                "push_timeout_s": 2.5,
            }
        )
    )

    settings = _load_config_file(Settings(data_dir=str(tmp_path)))

    assert settings.port == 8080
    assert settings.push_timeout_s == 2.5


def test_settings_env_vars(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VAPID_PUBLIC_KEY", "pub")
    monkeypatch.setenv("VAPID_PRIVATE_KEY", "priv")
    monkeypatch.setenv("LEAVEPUSH_DATA", str(tmp_path))

    settings = Settings()

    assert settings.vapid_public_key == "pub"
    assert settings.vapid_private_key == "priv"
    assert settings.data_dir == str(tmp_path)


def test_invalid_config_json_ignored(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text("{broken")

    settings = _load_config_file(Settings(data_dir=str(tmp_path), port=4000))

    assert settings.port == 4000
