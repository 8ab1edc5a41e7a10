# Tests for the /listings routes
import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from test_helpers import at, create_test_listing, create_test_user

from nestly.models import Listing, User

pytestmark = pytest.mark.asyncio

VALID_DRAFT = {
    "title": "  Canal house loft  ",
    "description": "Two bedrooms over the canal, bikes included.",
    "price": "145.50",
    "location": "Amsterdam",
}


async def seed_listings(
    session_maker: async_sessionmaker[AsyncSession], *listings: Listing
) -> None:
    async with session_maker() as session:
        async with session.begin():
            session.add_all(listings)


async def test_browse_listings_hides_unavailable(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
):
    host = create_test_user()
    await seed_listings(db_test_session_manager, host)
    await seed_listings(
        db_test_session_manager,
        create_test_listing(host.id, title="Open flat", created_at=at(1)),
        create_test_listing(
            host.id, title="Closed flat", availability=False, created_at=at(2)
        ),
    )

    response = await test_client.get("/listings")

    assert response.status_code == 200
    assert [item["title"] for item in response.json()] == ["Open flat"]


async def test_browse_listings_search_and_sort(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
):
    host = create_test_user()
    await seed_listings(db_test_session_manager, host)
    await seed_listings(
        db_test_session_manager,
        create_test_listing(
            host.id, title="Beach hut", location="Porto", price="80", created_at=at(1)
        ),
        create_test_listing(
            host.id, title="City loft", location="Lisbon", price="200", created_at=at(2)
        ),
        create_test_listing(
            host.id, title="Garden room", location="Porto", price="60", created_at=at(3)
        ),
    )

    newest = await test_client.get("/listings", params={"q": "porto"})
    assert [item["title"] for item in newest.json()] == ["Garden room", "Beach hut"]

    oldest = await test_client.get("/listings", params={"q": "PORTO", "sort": "oldest"})
    assert [item["title"] for item in oldest.json()] == ["Beach hut", "Garden room"]

    cheapest = await test_client.get("/listings", params={"sort": "price-low"})
    assert [item["title"] for item in cheapest.json()] == [
        "Garden room",
        "Beach hut",
        "City loft",
    ]

    priciest = await test_client.get("/listings", params={"sort": "price-high"})
    assert [item["title"] for item in priciest.json()][0] == "City loft"

    nothing = await test_client.get("/listings", params={"q": "reykjavik"})
    assert nothing.json() == []

    padded = await test_client.get("/listings", params={"q": " porto"})
    assert padded.json() == []


async def test_browse_listings_unknown_sort_is_rejected(test_client: AsyncClient):
    response = await test_client.get("/listings", params={"sort": "cheapest"})
    assert response.status_code == 422


async def test_create_listing_requires_login(test_client: AsyncClient):
    response = await test_client.post("/listings", json=VALID_DRAFT)
    assert response.status_code == 401


async def test_create_listing_success(
    authenticated_client: AsyncClient, logged_in_user: User
):
    response = await authenticated_client.post("/listings", json=VALID_DRAFT)

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["title"] == "Canal house loft"
    assert Decimal(str(data["price"])) == Decimal("145.50")
    assert data["owner_id"] == str(logged_in_user.id)
    assert data["availability"] is True

    fetched = await authenticated_client.get(f"/listings/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["location"] == "Amsterdam"


async def test_create_listing_reports_every_problem(authenticated_client: AsyncClient):
    response = await authenticated_client.post(
        "/listings",
        json={"title": "Loft", "description": "", "price": "-3", "location": "  "},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == [
        "title_too_short",
        "description_required",
        "invalid_price",
        "location_required",
    ]

    listings = await authenticated_client.get("/users/me/listings")
    assert listings.json() == []


async def test_create_listing_with_sub_cent_price_is_rejected(
    authenticated_client: AsyncClient,
):
    response = await authenticated_client.post(
        "/listings", json={**VALID_DRAFT, "price": "0.004"}
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == ["invalid_price"]
    assert (await authenticated_client.get("/users/me/listings")).json() == []


async def test_sub_cent_price_update_keeps_stored_price(
    authenticated_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    logged_in_user: User,
):
    listing = create_test_listing(logged_in_user.id)
    await seed_listings(db_test_session_manager, listing)

    response = await authenticated_client.patch(
        f"/listings/{listing.id}", json={"price": "0.004"}
    )

    assert response.status_code == 422
    fetched = (await authenticated_client.get(f"/listings/{listing.id}")).json()
    assert Decimal(str(fetched["price"])) == Decimal("120.00")


async def test_get_unknown_listing(test_client: AsyncClient):
    response = await test_client.get(f"/listings/{uuid.uuid4()}")
    assert response.status_code == 404


async def test_owner_can_update_listing(
    authenticated_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    logged_in_user: User,
):
    listing = create_test_listing(logged_in_user.id, title="Old title here")
    await seed_listings(db_test_session_manager, listing)

    response = await authenticated_client.patch(
        f"/listings/{listing.id}",
        json={"title": "  New title here ", "availability": False},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["title"] == "New title here"
    assert data["availability"] is False
    assert data["location"] == listing.location

    public = await authenticated_client.get("/listings")
    assert public.json() == []


async def test_invalid_update_leaves_listing_unchanged(
    authenticated_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    logged_in_user: User,
):
    listing = create_test_listing(logged_in_user.id, title="Harbour view flat")
    await seed_listings(db_test_session_manager, listing)

    response = await authenticated_client.patch(
        f"/listings/{listing.id}", json={"title": "New title", "price": "0"}
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == ["invalid_price"]

    fetched = (await authenticated_client.get(f"/listings/{listing.id}")).json()
    assert fetched["title"] == "Harbour view flat"
    assert Decimal(str(fetched["price"])) == Decimal("120.00")


async def test_non_owner_cannot_update_or_delete(
    authenticated_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
):
    host = create_test_user()
    await seed_listings(db_test_session_manager, host)
    listing = create_test_listing(host.id)
    await seed_listings(db_test_session_manager, listing)

    patched = await authenticated_client.patch(
        f"/listings/{listing.id}", json={"title": "Hijacked listing"}
    )
    deleted = await authenticated_client.delete(f"/listings/{listing.id}")

    assert patched.status_code == 403
    assert deleted.status_code == 403
    fetched = await authenticated_client.get(f"/listings/{listing.id}")
    assert fetched.json()["title"] == listing.title


async def test_owner_can_delete_listing(
    authenticated_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    logged_in_user: User,
):
    listing = create_test_listing(logged_in_user.id)
    await seed_listings(db_test_session_manager, listing)

    response = await authenticated_client.delete(f"/listings/{listing.id}")

    assert response.status_code == 204
    assert (await authenticated_client.get(f"/listings/{listing.id}")).status_code == 404


async def test_my_listings_include_unavailable_and_skip_others(
    authenticated_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    logged_in_user: User,
):
    host = create_test_user()
    await seed_listings(db_test_session_manager, host)
    await seed_listings(
        db_test_session_manager,
        create_test_listing(logged_in_user.id, title="Mine, open", created_at=at(1)),
        create_test_listing(
            logged_in_user.id,
            title="Mine, paused",
            availability=False,
            created_at=at(2),
        ),
        create_test_listing(host.id, title="Not mine", created_at=at(3)),
    )

    response = await authenticated_client.get("/users/me/listings")

    assert response.status_code == 200
    assert [item["title"] for item in response.json()] == [
        "Mine, paused",
        "Mine, open",
    ]
