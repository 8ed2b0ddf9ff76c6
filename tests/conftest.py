"""
pytest 설정 및 공통 픽스처 정의
"""
import sys
from pathlib import Path
from typing import AsyncGenerator, Sequence

import pytest

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# pytest 설정
# =============================================================================


def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# 데이터베이스 픽스처
# =============================================================================


@pytest.fixture(scope="function")
async def test_db() -> AsyncGenerator[None, None]:
    """
    테스트용 인메모리 SQLite 데이터베이스
    각 테스트 함수마다 새로운 DB 생성
    """
    from tortoise import Tortoise

    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["models"]}
    )
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


# =============================================================================
# 팩토리 픽스처
# =============================================================================


@pytest.fixture
def user_factory():
    """DB에 User 생성 (test_db 필요)"""
    from models.users import User
    from tests.fixtures.users import UPLOADER_A

    async def _create_user(username: str = UPLOADER_A["username"], api_key: str = None) -> User:
        return await User.create(username=username, api_key=api_key or f"key-{username}")

    return _create_user


@pytest.fixture
def encounter_factory():
    """EncounterIn 생성 팩토리"""
    from tests.fixtures.encounters import make_encounter

    return make_encounter


@pytest.fixture
def module_factory():
    """DB에 Module + ModulePart 생성 (test_db 필요)"""
    from config.module_optimizer import ATTR_TYPE_BY_NAME, ModuleCategory, PartType
    from models import Module, ModulePart
    from tests.fixtures.modules import ATTACK_CONFIG_ID, PART_ID_BY_NAME

    async def _create_module(
        user,
        uuid: str,
        parts: Sequence[tuple],
        quality: int = 3,
        category: ModuleCategory = ModuleCategory.ATTACK,
        config_id: int = ATTACK_CONFIG_ID,
    ) -> Module:
        module = await Module.create(
            uuid=uuid,
            name=f"Module {uuid}",
            config_id=config_id,
            quality=quality,
            category=category,
            user=user,
        )
        for name, value in parts:
            await ModulePart.create(
                module=module,
                part_id=PART_ID_BY_NAME[name],
                name=name,
                value=value,
                type=ATTR_TYPE_BY_NAME.get(name, PartType.BASIC),
            )
        return module

    return _create_module


def assert_approx_equal(actual: float, expected: float, tolerance: float = 1e-9):
    """부동소수점 근사 비교"""
    assert abs(actual - expected) <= tolerance, f"Expected {expected} ± {tolerance}, got {actual}"
