from typing import Any, AsyncGenerator

import pytest
from asyncstdlib import anext
from fastapi import FastAPI
from fastapi_users.db import SQLAlchemyUserDatabase
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nestly.auth_config import get_user_manager
from nestly.models import User
from nestly.schemas.user import UserCreate

TEST_USER_EMAIL = "testuser@example.com"
TEST_USER_PASSWORD = "password123"


# Helper function to create a user through the fastapi-users manager
async def create_registered_user(
    session_maker: async_sessionmaker[AsyncSession],
    user_data: UserCreate,
    user_manager_dependency: Any,
) -> User:
    async with session_maker() as session:
        user_manager_gen = user_manager_dependency(
            SQLAlchemyUserDatabase(session, User)
        )
        user_manager = await anext(user_manager_gen)
        try:
            user = await user_manager.create(user_data)
            await session.commit()
            await session.refresh(user)
            return user
        finally:
            await user_manager_gen.aclose()


# Fixture to provide an authenticated client
@pytest.fixture(scope="function")
async def authenticated_client(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    test_app: FastAPI,
) -> AsyncGenerator[AsyncClient, None]:
    user_data = UserCreate(
        email=TEST_USER_EMAIL,
        password=TEST_USER_PASSWORD,
        name="Test Guest",
    )
    await create_registered_user(db_test_session_manager, user_data, get_user_manager)

    login_data = {
        "username": user_data.email,  # fastapi-users uses email as username for login
        "password": user_data.password,
    }
    res = await test_client.post("/auth/jwt/login", data=login_data)
    assert res.status_code == 204, res.text

    # Send the auth cookie explicitly instead of relying on the cookie jar
    cookie = res.headers["set-cookie"]
    access_token = cookie.split(";")[0].split("=", 1)[1]
    test_client.cookies.clear()
    test_client.headers["Cookie"] = f"fastapiusersauth={access_token}"

    yield test_client

    del test_client.headers["Cookie"]


# Fixture to provide the User object corresponding to the authenticated client
@pytest.fixture(scope="function")
async def logged_in_user(
    authenticated_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
) -> User:
    """Provides the User object for the default authenticated user."""
    async with db_test_session_manager() as session:
        from nestly.repositories.user_repository import UserRepository

        user = await UserRepository(session).get_user_by_email(TEST_USER_EMAIL)
        if not user:
            pytest.fail(f"Test user '{TEST_USER_EMAIL}' not found in DB")
        return user
