import threading

from estatecache.cache import OfflineCache
from estatecache.connectivity import ConnectivityMonitor
from estatecache.favorites import COMPARE_KEY, FavoritesRegistry, rooms_from_label
from estatecache.models import Listing, ListingDetail
from estatecache.store import SQLiteStore


def build_store(tmp_path) -> SQLiteStore:
    store = SQLiteStore(path=tmp_path / "favorites.db")
    store.initialize()
    return store


def make_listing(reference: str, **overrides) -> Listing:
    data = dict(reference=reference, slug=f"slug-{reference}", city="Lille",
                price=120000, square_meter=35, label_type="Appartement")
    data.update(overrides)
    return Listing(**data)


def no_fetch(slug):
    raise AssertionError(f"unexpected detail fetch for {slug}")


def test_rooms_from_label():
    assert rooms_from_label("T3") == 3
    assert rooms_from_label("Appartement t2 meublé") == 2
    assert rooms_from_label("Studio") == 1
    assert rooms_from_label("Maison") is None
    assert rooms_from_label("") is None
    assert rooms_from_label(None) is None


def test_toggle_favorite_adds_then_removes(tmp_path):
    registry = FavoritesRegistry(store=build_store(tmp_path))
    listing = make_listing("A", title="Déjà enrichi")

    assert registry.toggle_favorite(listing) is True
    assert registry.is_favorite("A")
    assert registry.favorites_count == 1

    assert registry.toggle_favorite(listing) is False
    assert not registry.is_favorite("A")
    assert registry.favorites == []


def test_add_favorite_is_idempotent_and_persisted(tmp_path):
    store = build_store(tmp_path)
    registry = FavoritesRegistry(store=store)
    registry.add_favorite(make_listing("A", title="T"))
    registry.add_favorite(make_listing("A", title="T"))
    registry.add_favorite(make_listing("B", title="T"))

    reloaded = FavoritesRegistry(store=store)

    assert [item.reference for item in reloaded.favorites] == ["A", "B"]

    reloaded.remove_favorite("A")
    assert [item.reference for item in FavoritesRegistry(store=store).favorites] == ["B"]
    reloaded.clear_favorites()
    assert FavoritesRegistry(store=store).favorites == []


def test_compare_list_is_capped_at_three(tmp_path):
    registry = FavoritesRegistry(store=build_store(tmp_path))
    for reference in ("A", "B", "C"):
        assert registry.toggle_compare(make_listing(reference, title="T")) is True
    assert registry.can_add_to_compare is False

    assert registry.toggle_compare(make_listing("D", title="T")) is False

    assert [item.reference for item in registry.compare_list] == ["A", "B", "C"]
    assert registry.compare_count == 3


def test_toggle_compare_removes_existing_even_when_full(tmp_path):
    registry = FavoritesRegistry(store=build_store(tmp_path))
    for reference in ("A", "B", "C"):
        registry.add_to_compare(make_listing(reference, title="T"))

    assert registry.toggle_compare(make_listing("B")) is False
    assert [item.reference for item in registry.compare_list] == ["A", "C"]
    assert registry.can_add_to_compare is True


def test_add_to_compare_rejects_duplicates_and_overflow(tmp_path):
    store = build_store(tmp_path)
    registry = FavoritesRegistry(store=store)

    assert registry.add_to_compare(make_listing("A", title="T")) is True
    assert registry.add_to_compare(make_listing("A", title="T")) is False
    registry.add_to_compare(make_listing("B", title="T"))
    registry.add_to_compare(make_listing("C", title="T"))
    assert registry.add_to_compare(make_listing("D", title="T")) is False

    assert len(store.read(COMPARE_KEY).value) == 3
    registry.remove_from_compare("A")
    registry.clear_compare()
    assert store.read(COMPARE_KEY).value == []


def test_enriched_listing_skips_detail_fetch(tmp_path):
    registry = FavoritesRegistry(store=build_store(tmp_path), detail_fetcher=no_fetch)

    registry.toggle_favorite(make_listing("A", title="Already titled"))
    registry.wait_for_enrichment(timeout=5)

    assert registry.favorites[0].title == "Already titled"


def test_enrichment_merges_title_and_rooms_from_label(tmp_path):
    store = build_store(tmp_path)

    def fetch(slug):
        return ListingDetail(reference="A", slug=slug, title="Appartement T3 lumineux",
                             number_of_beds=5)

    registry = FavoritesRegistry(store=store, detail_fetcher=fetch)
    registry.toggle_favorite(make_listing("A", label_type="T3"))
    registry.wait_for_enrichment(timeout=5)

    enriched = registry.favorites[0]
    assert enriched.title == "Appartement T3 lumineux"
    assert enriched.number_of_beds == 3
    assert FavoritesRegistry(store=store).favorites[0].title == "Appartement T3 lumineux"


def test_enrichment_falls_back_to_detail_room_count(tmp_path):

    def fetch(slug):
        return ListingDetail(reference="A", slug=slug, title="Maison", number_of_beds=4)

    registry = FavoritesRegistry(store=build_store(tmp_path), detail_fetcher=fetch)
    registry.toggle_compare(make_listing("A", label_type="Maison"))
    registry.wait_for_enrichment(timeout=5)

    assert registry.compare_list[0].number_of_beds == 4
    assert registry.compare_list[0].title == "Maison"


def test_enrichment_keeps_existing_room_count(tmp_path):

    def fetch(slug):
        return ListingDetail(reference="A", slug=slug, title="Loft", number_of_beds=9)

    registry = FavoritesRegistry(store=build_store(tmp_path), detail_fetcher=fetch)
    registry.add_favorite(make_listing("A", label_type="T2", number_of_beds=2))
    registry.wait_for_enrichment(timeout=5)

    assert registry.favorites[0].number_of_beds == 2


def test_enrichment_failure_applies_label_heuristic(tmp_path, caplog):

    def fetch(slug):
        raise ConnectionError("offline")

    registry = FavoritesRegistry(store=build_store(tmp_path), detail_fetcher=fetch)
    registry.add_favorite(make_listing("A", label_type="Studio"))
    registry.add_favorite(make_listing("B", label_type="Maison"))
    with caplog.at_level("WARNING"):
        registry.wait_for_enrichment(timeout=5)

    by_ref = {item.reference: item for item in registry.favorites}
    assert by_ref["A"].number_of_beds == 1
    assert by_ref["A"].title is None
    assert by_ref["B"].number_of_beds is None
    assert "Failed to enrich" in caplog.text


def test_enrichment_does_not_resurrect_removed_entry(tmp_path):
    release = threading.Event()

    def fetch(slug):
        release.wait(timeout=5)
        return ListingDetail(reference="A", slug=slug, title="Late title")

    registry = FavoritesRegistry(store=build_store(tmp_path), detail_fetcher=fetch)
    registry.toggle_favorite(make_listing("A"))
    registry.remove_favorite("A")
    release.set()
    registry.wait_for_enrichment(timeout=5)

    assert registry.favorites == []


def test_favorites_join_the_cache_aggregate(tmp_path):
    store = build_store(tmp_path)
    registry = FavoritesRegistry(store=store)
    registry.add_favorite(make_listing("F", title="Fav"))
    cache = OfflineCache(store=store, connectivity=ConnectivityMonitor(network_signal=lambda: True))

    assert [item.reference for item in cache.get_all_cached_listings()] == ["F"]
    registry.close()
