"""
모듈 관리 / 가져오기 통합 테스트 (SQLite)
"""
import pytest

from DTO.module_optimizer import ModuleCreateRequest, ModuleUpdateRequest
from exceptions import InvalidCategoryError, InvalidModuleDataError, UserModuleNotFoundError
from models import Module, ModulePart
from service.module_optimizer.import_service import ModuleImportService
from service.module_optimizer.module_service import ModuleService
from tests.fixtures.modules import DEFENSE_CONFIG_ID, module_payload

pytestmark = pytest.mark.integration


class TestModuleImport:
    """모듈 가져오기"""

    async def test_add_then_update(self, test_db, user_factory):
        user = await user_factory()
        payload = [
            module_payload("u-1", [("Might", 5)]),
            module_payload("u-2", [("Agility", 4), ("Luck Focus", 2)]),
        ]

        first = await ModuleImportService.import_modules(user.id, payload)
        assert (first.added, first.updated, first.errors) == (2, 0, 0)

        payload[0] = module_payload("u-1", [("Might", 9), ("Critical Focus", 3)], quality=4)
        second = await ModuleImportService.import_modules(user.id, payload)
        assert (second.added, second.updated, second.errors) == (0, 2, 0)

        module = await Module.get(uuid="u-1").prefetch_related("parts")
        assert module.quality == 4
        assert sorted((p.name, p.value) for p in module.parts) == [("Critical Focus", 3), ("Might", 9)]
        assert await ModulePart.all().count() == 4

    async def test_invalid_items_reported(self, test_db, user_factory):
        user = await user_factory()
        payload = [
            module_payload("ok", [("Might", 5)]),
            module_payload("bad-quality", [("Might", 5)], quality=9),
            module_payload("bad-category", [("Might", 5)], category="WEAPON"),
            module_payload("no-parts", []),
            {"uuid": "bad-config", "name": "x", "config_id": 1, "quality": 3, "category": "ATTACK",
             "parts": [{"part_id": 1110, "name": "Might", "value": 1, "type": "basic"}]},
            {"uuid": "bad-part", "name": "x", "config_id": 5500101, "quality": 3, "category": "ATTACK",
             "parts": [{"part_id": 1110, "name": "Might", "value": 0, "type": "basic"}]},
            "not-a-dict",
        ]

        result = await ModuleImportService.import_modules(user.id, payload)

        assert result.added == 1
        assert result.errors == 6
        assert [e.index for e in result.error_list] == [1, 2, 3, 4, 5, 6]
        assert result.error_list[0].uuid == "bad-quality"

    async def test_other_users_uuid_not_overwritten(self, test_db, user_factory):
        owner = await user_factory("owner")
        intruder = await user_factory("intruder")
        await ModuleImportService.import_modules(owner.id, [module_payload("shared", [("Might", 5)])])

        result = await ModuleImportService.import_modules(intruder.id, [module_payload("shared", [("Might", 20)])])

        assert result.errors == 1
        module = await Module.get(uuid="shared").prefetch_related("parts")
        assert module.user_id == owner.id
        assert module.parts[0].value == 5


class TestModuleService:
    """모듈 CRUD"""

    async def test_create_derives_category(self, test_db, user_factory):
        user = await user_factory()
        request = ModuleCreateRequest.model_validate({
            "uuid": "def-1",
            "configId": DEFENSE_CONFIG_ID,
            "quality": 2,
            "parts": [{"partId": 1308, "name": "Physical Resistance", "value": 6}],
        })

        module = await ModuleService.create_module(user.id, request)

        assert module.category.value == "DEFENSE"
        assert module.name == "Basic Defense"
        assert module.parts[0].type.value == "basic"

    async def test_filter_by_category_and_quality(self, test_db, user_factory, module_factory):
        user = await user_factory()
        await module_factory(user, "a-1", [("Might", 5)], quality=3)
        await module_factory(user, "a-2", [("Might", 5)], quality=5)

        assert len(await ModuleService.get_user_modules(user.id, "ATTACK")) == 2
        assert len(await ModuleService.get_user_modules(user.id, "ATTACK", 5)) == 1
        assert len(await ModuleService.get_user_modules(user.id, "SUPPORT")) == 0
        with pytest.raises(InvalidCategoryError):
            await ModuleService.get_user_modules(user.id, "WEAPON")

    async def test_update_replaces_parts(self, test_db, user_factory, module_factory):
        user = await user_factory()
        module = await module_factory(user, "a-1", [("Might", 5)])

        updated = await ModuleService.update_module(user.id, module.id, ModuleUpdateRequest.model_validate({
            "quality": 5,
            "parts": [{"partId": 1111, "name": "Agility", "value": 8}],
        }))

        assert updated.quality == 5
        assert [(p.name, p.value) for p in updated.parts] == [("Agility", 8)]

    async def test_update_rejects_invalid_parts(self, test_db, user_factory, module_factory):
        user = await user_factory()
        module = await module_factory(user, "a-1", [("Might", 5)])
        with pytest.raises(InvalidModuleDataError):
            await ModuleService.update_module(user.id, module.id, ModuleUpdateRequest(parts=[]))

    async def test_ownership_enforced(self, test_db, user_factory, module_factory):
        owner = await user_factory("owner")
        other = await user_factory("other")
        module = await module_factory(owner, "a-1", [("Might", 5)])

        with pytest.raises(UserModuleNotFoundError):
            await ModuleService.delete_module(other.id, module.id)
        with pytest.raises(UserModuleNotFoundError):
            await ModuleService.get_module(other.id, module.id)

        await ModuleService.delete_module(owner.id, module.id)
        assert await Module.all().count() == 0
        assert await ModulePart.all().count() == 0
