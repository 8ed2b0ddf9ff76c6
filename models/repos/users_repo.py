from typing import Optional

from models import User


async def find_user_by_api_key(api_key: str) -> Optional[User]:
    if not api_key:
        return None
    return await User.get_or_none(api_key=api_key)
