import pytest
from sqlalchemy import func, select
from storefinder.core.errors import ValidationError
from storefinder.models.review import Review
from storefinder.models.store import Store
from storefinder.repositories.store_repository import StoreRepository


@pytest.mark.asyncio
async def test_create_store(session, author, store_data):
    repo = StoreRepository(session)

    store = await repo.create(
        author.id,
        store_data("Café Noir", tags=["cafe", " vegan ", ""], description=" Кофе "),
    )
    assert isinstance(store, Store)
    assert store.id is not None
    assert store.slug == "cafe-noir"
    assert store.tags == {"cafe", "vegan"}
    assert store.description == "Кофе"
    assert store.author_id == author.id
    assert store.created is not None
    assert store.location == {
        "type": "Point",
        "coordinates": [30.52, 50.45],
        "address": "Khreshchatyk 1",
    }


@pytest.mark.asyncio
async def test_slug_collisions_get_numeric_suffix(session, author, store_data):
    repo = StoreRepository(session)

    first = await repo.create(author.id, store_data("Cafe Noir"))
    second = await repo.create(author.id, store_data("Cafe Noir"))
    third = await repo.create(author.id, store_data("cafe  noir!"))
    other = await repo.create(author.id, store_data("Cafe Noir Bis"))

    assert first.slug == "cafe-noir"
    assert second.slug == "cafe-noir-2"
    assert third.slug == "cafe-noir-3"
    assert other.slug == "cafe-noir-bis"


@pytest.mark.asyncio
async def test_create_requires_name_and_location(session, author, store_data):
    repo = StoreRepository(session)

    with pytest.raises(ValidationError) as exc:
        await repo.create(author.id, store_data(""))
    assert exc.value.field == "name"

    with pytest.raises(ValidationError) as exc:
        await repo.create(author.id, {"name": "No Location"})
    assert exc.value.field == "location"

    with pytest.raises(ValidationError) as exc:
        await repo.create(
            author.id, {"name": "Bad", "location": {"coordinates": ["east", 50]}}
        )
    assert exc.value.field == "lng"

    result = await session.execute(select(func.count(Store.id)))
    assert result.scalar() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("page", [1, 2, 3, 4])
async def test_list_paginated_item_count(session, make_store, page):
    n, page_size = 5, 2
    for i in range(n):
        await make_store(f"Store {i}")

    result = await StoreRepository(session).list_paginated(page, page_size)

    assert result.total_count == n
    assert len(result.items) == min(page_size, max(0, n - (page - 1) * page_size))


@pytest.mark.asyncio
async def test_list_paginated_newest_first(session, make_store):
    created = [await make_store(f"Store {i}") for i in range(3)]

    result = await StoreRepository(session).list_paginated(1, 10)

    assert [store.id for store in result.items] == [s.id for s in reversed(created)]


@pytest.mark.asyncio
async def test_list_paginated_attaches_reviews_on_request(session, author, make_store):
    store = await make_store("Reviewed")
    session.add(Review(author_id=author.id, store_id=store.id, text="Good", rating=4))
    await session.commit()
    session.expunge_all()

    result = await StoreRepository(session).list_paginated(1, 4, include_reviews=True)

    reviews = result.items[0].reviews
    assert [review.rating for review in reviews] == [4]
    assert reviews[0].author.name == "Alice"


@pytest.mark.asyncio
async def test_find_by_tag(session, make_store):
    cafe = await make_store("Cafe", tags=["cafe", "vegan"])
    bar = await make_store("Bar", tags=["bar"])
    await make_store("Untagged")

    repo = StoreRepository(session)

    assert {store.id for store in await repo.find_by_tag("cafe")} == {cafe.id}
    assert {store.id for store in await repo.find_by_tag()} == {cafe.id, bar.id}
    assert await repo.find_by_tag("missing") == []


@pytest.mark.asyncio
async def test_get_by_slug(session, make_store):
    store = await make_store("Slug Store")
    repo = StoreRepository(session)

    found = await repo.get_by_slug("slug-store")
    assert found.id == store.id
    assert found.author.name == "Alice"
    assert await repo.get_by_slug("nope") is None
