from fastapi_users import schemas


class UserRead(schemas.BaseUser):
    name: str


class UserCreate(schemas.BaseUserCreate):
    name: str


class UserUpdate(schemas.BaseUserUpdate):
    name: str | None = None
