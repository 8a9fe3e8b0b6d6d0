import pytest

import estate_cli
from estatecache.app import build_application
from estatecache.config import Settings
from estatecache.models import Category, Listing


def make_settings(tmp_path, **overrides) -> Settings:
    data = dict(
        api_url="https://api.example.com",
        store_url=f"sqlite:///{tmp_path / 'app.db'}",
    )
    data.update(overrides)
    return Settings(**data)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("API_URL", " https://api.example.com ")
    monkeypatch.setenv("API_TOKEN", "secret")
    monkeypatch.delenv("PROBE_URL", raising=False)
    monkeypatch.delenv("SHARE_WEBHOOK", raising=False)

    settings = Settings.from_env()

    assert settings.api_url == "https://api.example.com"
    assert settings.api_token == "secret"
    assert settings.probe_url == "https://api.example.com"


def test_settings_require_api_url(monkeypatch):
    monkeypatch.setenv("API_URL", "")

    with pytest.raises(ValueError):
        Settings.from_env()


def test_build_application_offline_serves_empty_page(tmp_path):
    app = build_application(make_settings(tmp_path), network_signal=lambda: False)
    try:
        page = app.listings.get_all()
        assert page.announcements == []
        assert page.total_result == 0
        assert app.cache.is_offline
        assert app.device.share_target is None
    finally:
        app.close()


def test_build_application_wires_share_webhook(tmp_path):
    settings = make_settings(tmp_path, share_webhook="https://hooks.example.com/share")
    app = build_application(settings, network_signal=lambda: True)
    try:
        assert app.device.share_target.webhook_url == "https://hooks.example.com/share"
    finally:
        app.close()


def seed_purchase_cache(tmp_path):
    app = build_application(make_settings(tmp_path), network_signal=lambda: False)
    try:
        app.cache.cache_listings(
            [Listing(reference="A", slug="a", city="Lille", price=100000, title="T2")],
            Category.PURCHASE,
        )
    finally:
        app.close()


def test_main_lists_cached_listings_offline(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("API_URL", "https://api.example.com")
    monkeypatch.setenv("STORE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    seed_purchase_cache(tmp_path)

    with caplog.at_level("INFO"):
        exit_code = estate_cli.main(["--list", "--offline"])

    assert exit_code == 0
    assert "1 result(s) (offline)" in caplog.text
    assert "A | T2" in caplog.text


def test_main_toggles_favorite_from_cache(tmp_path, monkeypatch):
    monkeypatch.setenv("API_URL", "https://api.example.com")
    monkeypatch.setenv("STORE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    seed_purchase_cache(tmp_path)

    assert estate_cli.main(["--favorite", "A", "--offline"]) == 0
    assert estate_cli.main(["--favorite", "missing", "--offline"]) == 1

    app = build_application(make_settings(tmp_path), network_signal=lambda: False)
    try:
        assert [item.reference for item in app.favorites.favorites] == ["A"]
    finally:
        app.close()


def test_main_reports_offline_detail_miss(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("API_URL", "https://api.example.com")
    monkeypatch.setenv("STORE_URL", f"sqlite:///{tmp_path / 'app.db'}")

    with caplog.at_level("ERROR"):
        exit_code = estate_cli.main(["--detail", "unknown-slug", "--offline"])

    assert exit_code == 1
    assert "Annonce non disponible hors ligne" in caplog.text


def test_main_handles_favorite_and_compare_together(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("API_URL", "https://api.example.com")
    monkeypatch.setenv("STORE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    app = build_application(make_settings(tmp_path), network_signal=lambda: False)
    try:
        app.cache.cache_listings(
            [Listing(reference=ref, slug=ref.lower(), title=f"T {ref}") for ref in "ABCDE"],
            Category.PURCHASE,
        )
    finally:
        app.close()

    assert estate_cli.main(["--favorite", "A", "--compare", "B", "--offline"]) == 0
    for reference in ("C", "D"):
        assert estate_cli.main(["--compare", reference, "--offline"]) == 0

    with caplog.at_level("ERROR"):
        assert estate_cli.main(["--compare", "E", "--offline"]) == 1
    assert "Compare list is full" in caplog.text

    app = build_application(make_settings(tmp_path), network_signal=lambda: False)
    try:
        assert [item.reference for item in app.favorites.favorites] == ["A"]
        assert [item.reference for item in app.favorites.compare_list] == ["B", "C", "D"]
    finally:
        app.close()
