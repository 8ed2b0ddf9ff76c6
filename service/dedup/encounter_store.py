"""Tortoise 기반 EncounterStore 구현"""
from typing import List, Optional

from tortoise.transactions import in_transaction

from DTO.upload import EncounterIn
from models.repos import encounter_repo
from service.dedup.encounter_summary import PersistedEncounter


class TortoiseEncounterStore:
    """
    하나의 트랜잭션 커넥션에 묶인 저장소

    insert는 중첩 트랜잭션(savepoint) 안에서 실행되어
    유니크 충돌이 나도 바깥 트랜잭션은 계속 사용할 수 있습니다.
    """

    def __init__(self, conn):
        self.conn = conn

    async def find_exact(self, fingerprint: str, source_hash: Optional[str]) -> Optional[int]:
        return await encounter_repo.find_exact_duplicate(fingerprint, source_hash, using_db=self.conn)

    async def find_candidates(self, player_set_hash: str) -> List[PersistedEncounter]:
        encounters = await encounter_repo.find_fuzzy_candidates(player_set_hash, using_db=self.conn)
        return [PersistedEncounter.from_model(e) for e in encounters]

    async def insert(
        self,
        user_id: int,
        payload: EncounterIn,
        fingerprint: str,
        player_set_hash: str,
    ) -> int:
        async with in_transaction(self.conn.connection_name) as savepoint:
            encounter = await encounter_repo.create_encounter(
                user_id, payload, fingerprint, player_set_hash, using_db=savepoint
            )
        return encounter.id

    async def increment_upload_counter(self, user_id: int, count: int) -> None:
        await encounter_repo.increment_upload_counter(user_id, count, using_db=self.conn)
