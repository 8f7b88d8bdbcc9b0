import json

import pytest
from meteonet_sim import config as config_module
from meteonet_sim.config import DEFAULT_STATIONS, Settings
from pydantic import ValidationError


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in ("METEONET_TICK_SECONDS", "METEONET_STATIONS", "METEONET_SEED"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)  # no stray .env
    monkeypatch.setenv("METEONET_CONFIG_PATH", str(tmp_path / "missing.json"))


def test_defaults(clean_env) -> None:
    settings = Settings.load()

    assert settings.tick_seconds == 60.0
    assert settings.channel_prefix == "sensores/clima"
    assert settings.seed is None
    assert [s.name for s in settings.stations] == [
        "Barcelona",
        "Tarragona",
        "Girona",
        "Lleida",
        "Pirineos",
    ]
    assert settings.stations == DEFAULT_STATIONS


def test_env_overrides(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("METEONET_TICK_SECONDS", "2.5")
    monkeypatch.setenv("METEONET_SEED", "99")
    monkeypatch.setenv(
        "METEONET_STATIONS", json.dumps([{"id": 7, "name": "Reus", "region": "Litoral Sur"}])
    )

    settings = Settings.load()
    assert settings.tick_seconds == 2.5
    assert settings.seed == 99
    assert len(settings.stations) == 1
    assert settings.stations[0].name == "Reus"


def test_tick_seconds_must_be_positive(clean_env) -> None:
    with pytest.raises(ValidationError):
        Settings(tick_seconds=0)


def test_station_file_overrides(clean_env, monkeypatch, tmp_path) -> None:
    path = tmp_path / "stations.json"
    path.write_text(
        json.dumps(
            {
                "stations": [
                    {"id": 10, "name": "Vielha", "region": "Alta Montaña"},
                    {"id": 11, "name": "Sitges", "region": "Costa Dorada"},
                ],
                "tick_seconds": 30,
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("METEONET_CONFIG_PATH", str(path))

    settings = Settings.load()
    assert [s.id for s in settings.stations] == [10, 11]
    assert settings.tick_seconds == 30
    # Unknown regions are accepted; they simply get no bias
    assert settings.stations[1].known_region is None


def test_broken_station_file_falls_back(clean_env, monkeypatch, tmp_path) -> None:
    path = tmp_path / "stations.json"
    path.write_text("{not json", encoding="utf-8")
    monkeypatch.setenv("METEONET_CONFIG_PATH", str(path))

    settings = Settings.load()
    assert settings.stations == DEFAULT_STATIONS


def test_module_settings_instance() -> None:
    assert isinstance(config_module.settings, Settings)
    assert config_module.settings.tz.key == config_module.settings.timezone
