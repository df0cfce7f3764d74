from decimal import Decimal

from finance_tracker.settings import ClientSettings, JsonFileSettingsStore


def test_defaults_when_file_missing(tmp_path):
    settings = JsonFileSettingsStore(tmp_path / "missing.json").load()
    assert settings == ClientSettings()
    assert settings.monthly_budget == Decimal("20000")
    assert settings.last_seen_month is None


def test_save_and_reload(tmp_path):
    store = JsonFileSettingsStore(tmp_path / "nested" / "settings.json")
    store.save(ClientSettings().with_budget(Decimal("1500.50")).with_last_seen_month("2025-11"))

    reloaded = JsonFileSettingsStore(store.path).load()
    assert reloaded.monthly_budget == Decimal("1500.50")
    assert reloaded.last_seen_month == "2025-11"


def test_corrupt_file_yields_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{ not json", encoding="utf-8")
    assert JsonFileSettingsStore(path).load() == ClientSettings()

    path.write_text("[1, 2]", encoding="utf-8")
    assert JsonFileSettingsStore(path).load() == ClientSettings()
