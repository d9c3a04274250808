import pytest
from storefinder.core.errors import NotFoundError, ValidationError
from storefinder.services.discovery_service import DiscoveryService


@pytest.mark.asyncio
async def test_pagination_scenario_with_redirect(session, make_store):
    for i in range(5):
        await make_store(f"Store {i}")

    svc = DiscoveryService(session, page_size=4)

    first = await svc.get_stores(1)
    assert len(first.items) == 4
    assert first.page_count == 2
    assert first.total_count == 5
    assert first.redirect_to is None

    second = await svc.get_stores("2")
    assert len(second.items) == 1
    assert second.redirect_to is None

    beyond = await svc.get_stores(3)
    assert beyond.items == []
    assert beyond.redirect_to == 2
    assert beyond.page == 3

    far_beyond = await svc.get_stores(100)
    assert far_beyond.redirect_to == 2


@pytest.mark.asyncio
async def test_empty_dataset(session):
    svc = DiscoveryService(session, page_size=4)

    listing = await svc.get_stores()
    assert listing.items == []
    assert listing.page == 1
    assert listing.page_count == 0
    assert listing.redirect_to is None

    beyond = await svc.get_stores(3)
    assert beyond.redirect_to == 1


@pytest.mark.asyncio
async def test_huge_page_number_redirects(session, make_store):
    await make_store("Only")
    svc = DiscoveryService(session, page_size=4)

    listing = await svc.get_stores("99999999999999999999")

    assert listing.items == []
    assert listing.redirect_to == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["abc", "0", "-1", "1.5", 0, -3])
async def test_invalid_page_is_rejected(session, raw):
    svc = DiscoveryService(session)

    with pytest.raises(ValidationError) as exc:
        await svc.get_stores(raw)
    assert exc.value.field == "page"


@pytest.mark.asyncio
async def test_missing_page_defaults_to_first(session, make_store):
    await make_store("Only")
    svc = DiscoveryService(session)

    for raw in (None, "", "  "):
        listing = await svc.get_stores(raw)
        assert listing.page == 1
        assert len(listing.items) == 1


@pytest.mark.asyncio
async def test_get_by_tag_payload(session, make_store):
    cafe = await make_store("Cafe", tags=["cafe", "vegan"])
    await make_store("Diner", tags=["cafe"])

    listing = await DiscoveryService(session).get_by_tag("vegan")

    assert listing.selected_tag == "vegan"
    assert [(t.tag, t.count) for t in listing.tags] == [("cafe", 2), ("vegan", 1)]
    assert [store.id for store in listing.stores] == [cafe.id]

    all_tagged = await DiscoveryService(session).get_by_tag(None)
    assert all_tagged.selected_tag is None
    assert len(all_tagged.stores) == 2


@pytest.mark.asyncio
async def test_get_by_slug_not_found(session, make_store):
    await make_store("Known")
    svc = DiscoveryService(session)

    store = await svc.get_by_slug("known")
    assert store.name == "Known"
    assert store.reviews == []

    with pytest.raises(NotFoundError) as exc:
        await svc.get_by_slug("unknown")
    assert exc.value.entity == "Store"
    assert exc.value.key == "unknown"
