"""
중복 제거 파이프라인

업로드 배치의 각 전투를 순서대로 처리합니다.
    1. fingerprint / player_set_hash 계산
    2. fingerprint 또는 source_hash 일치 → 기존 ID
    3. 같은 player_set_hash 후보 중 퍼지 중복 → 기존 ID
    4. 새로 저장 (fingerprint 유니크 충돌 시 재조회)

저장소는 EncounterStore 프로토콜로만 접근하며,
트랜잭션 경계는 호출자(UploadService)가 관리합니다.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from tortoise.exceptions import IntegrityError

from config.dedup import DEDUP, DedupConfig
from DTO.upload import EncounterIn
from service.dedup.encounter_summary import EncounterSummary, PersistedEncounter
from service.dedup.fingerprint import compute_fingerprint, compute_player_set_hash
from service.dedup.fuzzy_matcher import find_fuzzy_match

logger = logging.getLogger(__name__)


class EncounterStore(Protocol):
    """파이프라인이 사용하는 저장소 인터페이스"""

    async def find_exact(self, fingerprint: str, source_hash: Optional[str]) -> Optional[int]:
        ...

    async def find_candidates(self, player_set_hash: str) -> List[PersistedEncounter]:
        ...

    async def insert(
        self,
        user_id: int,
        payload: EncounterIn,
        fingerprint: str,
        player_set_hash: str,
    ) -> int:
        """fingerprint 충돌 시 IntegrityError"""
        ...

    async def increment_upload_counter(self, user_id: int, count: int) -> None:
        ...


class IngestResolution(str, Enum):
    CREATED = "created"
    EXACT = "exact"
    FUZZY = "fuzzy"
    RACE = "race"


@dataclass(frozen=True)
class IngestOutcome:
    """전투 한 건의 처리 결과"""

    encounter_id: int
    resolution: IngestResolution
    fingerprint: str

    @property
    def created(self) -> bool:
        return self.resolution == IngestResolution.CREATED


class DedupPipeline:
    """
    업로드 배치 중복 제거기

    Args:
        store: 저장소 (트랜잭션 커넥션에 묶인 구현)
        config: 버킷 크기 / 퍼지 임계값
    """

    def __init__(self, store: EncounterStore, config: DedupConfig = DEDUP):
        self.store = store
        self.config = config

    async def ingest_batch(self, user_id: int, encounters: Sequence[EncounterIn]) -> List[IngestOutcome]:
        """
        배치 처리 후 업로드 카운터 증가

        Returns:
            입력 순서와 같은 IngestOutcome 목록
        """
        outcomes = []
        for payload in encounters:
            outcomes.append(await self.ingest_one(user_id, payload))

        created = sum(1 for o in outcomes if o.created)
        await self.store.increment_upload_counter(user_id, created)
        return outcomes

    async def ingest_one(self, user_id: int, payload: EncounterIn) -> IngestOutcome:
        summary = EncounterSummary.from_upload(payload)
        fingerprint = compute_fingerprint(summary, self.config)
        player_set_hash = compute_player_set_hash(summary)

        existing_id = await self.store.find_exact(fingerprint, summary.source_hash)
        if existing_id is not None:
            logger.debug(f"정확 중복: fingerprint={fingerprint[:12]} → encounter {existing_id}")
            return IngestOutcome(existing_id, IngestResolution.EXACT, fingerprint)

        candidates = await self.store.find_candidates(player_set_hash)
        match = find_fuzzy_match(summary, candidates, self.config)
        if match is not None:
            logger.debug(
                f"퍼지 중복: fingerprint={fingerprint[:12]} → encounter {match.id} "
                f"(후보 {len(candidates)}개)"
            )
            return IngestOutcome(match.id, IngestResolution.FUZZY, fingerprint)

        try:
            new_id = await self.store.insert(user_id, payload, fingerprint, player_set_hash)
        except IntegrityError:
            winner_id = await self.store.find_exact(fingerprint, summary.source_hash)
            if winner_id is None:
                raise
            logger.warning(f"fingerprint 동시 저장 충돌: {fingerprint[:12]} → encounter {winner_id}")
            return IngestOutcome(winner_id, IngestResolution.RACE, fingerprint)

        return IngestOutcome(new_id, IngestResolution.CREATED, fingerprint)
