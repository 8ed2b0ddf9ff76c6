"""
HTTP API 통합 테스트

TestClient로 앱 전체(라우터, 인증, 예외 처리, Tortoise 등록)를 검증합니다.
"""
import pytest
from fastapi.testclient import TestClient

from app import create_app
from models import Encounter, User
from service.module_optimizer.cache import optimization_cache
from tests.fixtures.encounters import make_encounter
from tests.fixtures.modules import module_payload

pytestmark = pytest.mark.integration

API_KEY = "key-api-tester"
HEADERS = {"X-Api-Key": API_KEY}


@pytest.fixture
def client():
    with TestClient(create_app("sqlite://:memory:", generate_schemas=True)) as client:
        client.portal.call(_create_user)
        yield client


async def _create_user():
    await User.create(username="api-tester", api_key=API_KEY)


async def _first_fingerprint():
    encounter = await Encounter.all().order_by("id").first()
    return encounter.fingerprint


def encounter_json(**kwargs) -> dict:
    return make_encounter(**kwargs).model_dump(mode="json", by_alias=True)


def import_four_modules(client):
    payload = [
        module_payload("m-1", [("Might", 5), ("Agility", 3)]),
        module_payload("m-2", [("Might", 4)]),
        module_payload("m-3", [("Agility", 6)]),
        module_payload("m-4", [("Critical Focus", 7)]),
    ]
    return client.post("/module-optimizer/modules/import", json={"modules": payload}, headers=HEADERS)


def test_ping(client):
    response = client.get("/ping")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("headers", [{}, {"X-Api-Key": "unknown"}])
def test_requires_api_key(client, headers):
    response = client.post("/upload/check", json={"hashes": []}, headers=headers)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthorized"


class TestUploadApi:
    """업로드 엔드포인트"""

    def test_upload_then_reupload(self, client):
        body = {"schemaVersion": 1, "encounters": [encounter_json()]}

        first = client.post("/upload/encounters", json=body, headers=HEADERS)
        second = client.post("/upload/encounters", json=body, headers=HEADERS)

        assert first.status_code == 200
        assert first.json()["ingested"] == 1
        assert first.json()["created"] == 1
        assert second.json()["created"] == 0
        assert second.json()["ids"] == first.json()["ids"]

    def test_empty_batch_rejected(self, client):
        response = client.post("/upload/encounters", json={"encounters": []}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_malformed_body_rejected(self, client):
        response = client.post("/upload/encounters", json={"encounters": "nope"}, headers=HEADERS)

        assert response.status_code == 400
        assert set(response.json()["error"]) == {"code", "message"}

    def test_check_hashes(self, client):
        client.post("/upload/encounters", json={"encounters": [encounter_json()]}, headers=HEADERS)
        fingerprint = client.portal.call(_first_fingerprint)

        response = client.post("/upload/check", json={"hashes": [fingerprint, "deadbeef"]}, headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert [d["hash"] for d in body["duplicates"]] == [fingerprint]
        assert body["duplicates"][0]["encounterId"] > 0
        assert body["missing"] == ["deadbeef"]

    def test_check_too_many_hashes(self, client):
        response = client.post("/upload/check", json={"hashes": [str(i) for i in range(51)]}, headers=HEADERS)
        assert response.status_code == 400


class TestModuleOptimizerApi:
    """모듈 최적화 엔드포인트"""

    def test_import_and_list(self, client):
        imported = import_four_modules(client)
        assert imported.status_code == 200
        assert imported.json() == {"added": 4, "updated": 0, "errors": 0, "errorList": []}

        listed = client.get("/module-optimizer/modules", params={"category": "ATTACK"}, headers=HEADERS)
        body = listed.json()
        assert body["total"] == 4
        assert body["modules"][0]["uuid"] == "m-1"
        assert body["modules"][0]["parts"][0]["partId"] == 1110

    def test_optimize_response_shape(self, client):
        import_four_modules(client)

        response = client.post(
            "/module-optimizer/optimize",
            json={"category": "ATTACK", "constraints": {"maxSolutions": 3, "sortMode": "ByTotalAttr"}},
            headers=HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["solutions"]) == 1
        solution = body["solutions"][0]
        assert solution["rank"] == 1
        assert solution["totalAttrValue"] == 25
        assert solution["attrBreakdown"] == {"Might": 9, "Agility": 9, "Critical Focus": 7}
        assert body["metadata"]["cacheHit"] is False

    def test_optimize_insufficient_modules(self, client):
        response = client.post("/module-optimizer/optimize", json={"category": "SUPPORT"}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "insufficient_modules"

    def test_optimize_invalid_category(self, client):
        response = client.post("/module-optimizer/optimize", json={"category": "WEAPON"}, headers=HEADERS)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_create_update_delete(self, client):
        created = client.post("/module-optimizer/modules", json={
            "uuid": "manual-1",
            "configId": 5500101,
            "quality": 2,
            "parts": [{"partId": 1110, "name": "Might", "value": 3}],
        }, headers=HEADERS)
        assert created.status_code == 201
        module_id = created.json()["id"]
        assert created.json()["category"] == "ATTACK"
        assert created.json()["source"] == "manual"

        updated = client.put(f"/module-optimizer/modules/{module_id}", json={"quality": 4}, headers=HEADERS)
        assert updated.status_code == 200
        assert updated.json()["quality"] == 4

        deleted = client.delete(f"/module-optimizer/modules/{module_id}", headers=HEADERS)
        assert deleted.status_code == 204

        missing = client.delete(f"/module-optimizer/modules/{module_id}", headers=HEADERS)
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "module_not_found"

    def test_get_module(self, client):
        import_four_modules(client)
        listed = client.get("/module-optimizer/modules", headers=HEADERS).json()
        module_id = listed["modules"][0]["id"]

        found = client.get(f"/module-optimizer/modules/{module_id}", headers=HEADERS)
        assert found.status_code == 200
        assert found.json()["uuid"] == "m-1"

        missing = client.get("/module-optimizer/modules/999999", headers=HEADERS)
        assert missing.status_code == 404

    def test_export_then_reimport(self, client):
        import_four_modules(client)

        exported = client.get("/module-optimizer/modules/export", params={"category": "ALL"}, headers=HEADERS)
        assert exported.status_code == 200
        assert "modules-export.json" in exported.headers["content-disposition"]
        body = exported.json()
        assert body["version"] == "1.0"
        assert [m["uuid"] for m in body["modules"]] == ["m-1", "m-2", "m-3", "m-4"]
        assert {"part_id": 1110, "name": "Might", "value": 5, "type": "basic"} in body["modules"][0]["parts"]

        listed = client.get("/module-optimizer/modules", headers=HEADERS).json()
        for module in listed["modules"]:
            client.delete(f"/module-optimizer/modules/{module['id']}", headers=HEADERS)

        reimported = client.post("/module-optimizer/modules/import", json={"modules": body["modules"]}, headers=HEADERS)
        assert reimported.json()["added"] == 4

    def test_history_flow(self, client):
        import_four_modules(client)
        client.post("/module-optimizer/optimize", json={"category": "ATTACK"}, headers=HEADERS)
        client.portal.call(optimization_cache.drain)

        history = client.get("/module-optimizer/history", headers=HEADERS)
        assert history.status_code == 200
        body = history.json()
        assert body["total"] == 1
        item = body["history"][0]
        assert item["category"] == "ATTACK"
        assert item["topScore"] > 0

        detail = client.get(f"/module-optimizer/history/{item['id']}", headers=HEADERS)
        assert detail.status_code == 200
        assert detail.json()["solutions"][0]["rank"] == 1
        assert detail.json()["metadata"]["totalModules"] == 4

        deleted = client.delete(f"/module-optimizer/history/{item['id']}", headers=HEADERS)
        assert deleted.status_code == 204

        missing = client.get(f"/module-optimizer/history/{item['id']}", headers=HEADERS)
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "history_not_found"
