# Tests for InteractionRepository against an in-memory SQLite database
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession
from test_helpers import BASE_TIME, at, create_test_interaction, create_test_user

from nestly.repositories.interaction_repository import InteractionRepository


async def seed_users(session: AsyncSession, count: int):
    users = [create_test_user() for _ in range(count)]
    session.add_all(users)
    await session.commit()
    return users


async def test_create_interaction_assigns_id_and_recorded_at(db_session: AsyncSession):
    alice, bob = await seed_users(db_session, 2)
    repo = InteractionRepository(db_session)

    interaction = await repo.create_interaction(alice.id, bob.id, "Hi Bob", at(1))
    await db_session.commit()

    assert interaction.id is not None
    assert interaction.recorded_at is not None
    assert interaction.recorded_at == interaction.created_at


async def test_query_by_participant_returns_both_roles(db_session: AsyncSession):
    alice, bob, carol, dave = await seed_users(db_session, 4)
    db_session.add_all(
        [
            create_test_interaction(alice.id, bob.id, at(3), "a->b"),
            create_test_interaction(carol.id, alice.id, at(1), "c->a"),
            create_test_interaction(bob.id, alice.id, at(2), "b->a"),
            create_test_interaction(bob.id, dave.id, at(0), "b->d"),
        ]
    )
    await db_session.commit()

    result = await InteractionRepository(db_session).query_by_participant(alice.id)

    assert [i.message for i in result] == ["c->a", "b->a", "a->b"]


async def test_query_by_participant_with_counterpart_is_pair_only(
    db_session: AsyncSession,
):
    alice, bob, carol = await seed_users(db_session, 3)
    db_session.add_all(
        [
            create_test_interaction(alice.id, bob.id, at(1), "a->b"),
            create_test_interaction(bob.id, alice.id, at(2), "b->a"),
            create_test_interaction(alice.id, carol.id, at(3), "a->c"),
            create_test_interaction(bob.id, carol.id, at(4), "b->c"),
        ]
    )
    await db_session.commit()

    repo = InteractionRepository(db_session)
    from_alice = await repo.query_by_participant(alice.id, bob.id)
    from_bob = await repo.query_by_participant(bob.id, alice.id)

    assert [i.message for i in from_alice] == ["a->b", "b->a"]
    assert [i.id for i in from_bob] == [i.id for i in from_alice]


async def test_equal_timestamps_are_ordered_by_insertion(db_session: AsyncSession):
    alice, bob = await seed_users(db_session, 2)
    first = create_test_interaction(bob.id, alice.id, at(5), "second inserted")
    first.created_at = BASE_TIME + timedelta(seconds=2)
    second = create_test_interaction(alice.id, bob.id, at(5), "first inserted")
    second.created_at = BASE_TIME + timedelta(seconds=1)
    db_session.add_all([first, second])
    await db_session.commit()

    result = await InteractionRepository(db_session).query_by_participant(alice.id)

    assert [i.message for i in result] == ["first inserted", "second inserted"]


async def test_query_for_user_without_history_is_empty(db_session: AsyncSession):
    (alice,) = await seed_users(db_session, 1)
    assert await InteractionRepository(db_session).query_by_participant(alice.id) == []
