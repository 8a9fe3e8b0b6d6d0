from types import SimpleNamespace

from estatecache.device import (
    DeviceBridge,
    ShareContent,
    WebhookShareTarget,
    format_share_content,
)
from estatecache.models import Listing


class DummyResponse:

    def raise_for_status(self):
        pass


def test_webhook_share_target_posts(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append(SimpleNamespace(url=url, json=json, timeout=timeout))
        return DummyResponse()

    monkeypatch.setattr("estatecache.device.requests.post", fake_post)

    target = WebhookShareTarget(webhook_url="https://hooks.example.com/share")
    target.share(ShareContent(title="T", text="hello", url="https://example.com/a"))

    assert len(calls) == 1
    assert calls[0].url == "https://hooks.example.com/share"
    assert calls[0].json == {"title": "T", "text": "hello", "url": "https://example.com/a"}


def test_bridge_logs_and_absorbs_share_failures(caplog):

    class FailingTarget:

        def share(self, content):
            raise RuntimeError("boom")

    bridge = DeviceBridge(share_target=FailingTarget())
    with caplog.at_level("ERROR"):
        bridge.share(ShareContent(title="T", text="x", url="u"))

    assert "Failed to share" in caplog.text


def test_bridge_without_capabilities_is_silent():
    bridge = DeviceBridge()

    bridge.share(ShareContent(title="T", text="x", url="u"))
    bridge.haptic_feedback()


def test_bridge_forwards_haptics_and_absorbs_errors():
    styles = []

    class RecordingHaptics:

        def impact(self, style):
            styles.append(style)

    class BrokenHaptics:

        def impact(self, style):
            raise OSError("no vibrator")

    DeviceBridge(haptics=RecordingHaptics()).haptic_feedback("medium")
    DeviceBridge(haptics=BrokenHaptics()).haptic_feedback()

    assert styles == ["medium"]


def test_format_share_content_prefers_title():
    listing = Listing(reference="A", city="Lille", price=245000, label_type="T3")

    content = format_share_content(listing, "https://example.com/a")
    assert content.text == "Découvrez cette annonce : T3 - 245\u202f000 € - Lille"
    assert content.title == "Annonce immobilière : T3"

    titled = Listing(reference="A", city="Lille", price=900, title="Studio centre")
    assert format_share_content(titled, "u").text.startswith(
        "Découvrez cette annonce : Studio centre - 900 €")
