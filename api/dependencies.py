"""요청 공통 의존성"""
from typing import Optional

from fastapi import Header

from exceptions import InvalidApiKeyError
from models import User
from models.repos.users_repo import find_user_by_api_key


async def get_current_user(x_api_key: Optional[str] = Header(default=None)) -> User:
    """X-Api-Key 헤더 → User (없거나 모르는 키면 401)"""
    user = await find_user_by_api_key(x_api_key or "")
    if user is None:
        raise InvalidApiKeyError()
    return user
