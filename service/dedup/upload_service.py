"""
전투 기록 업로드 서비스

배치 전체를 하나의 트랜잭션으로 처리합니다.
중간에 실패하면 어떤 행도 남지 않습니다.
"""
import logging
from dataclasses import dataclass
from typing import List, Sequence

from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from config.dedup import DEDUP, DedupConfig, UPLOAD
from DTO.upload import CheckHashesResponse, DuplicateHash, EncounterIn
from exceptions import EmptyUploadError, StorageFailureError, TooManyHashesError, UploadBatchTooLargeError
from models.repos import encounter_repo
from service.dedup.encounter_store import TortoiseEncounterStore
from service.dedup.pipeline import DedupPipeline, IngestOutcome

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """업로드 결과"""

    ids: List[int]
    """encounters[i]에 대응하는 저장 ID"""

    created: int
    """새로 저장된 수"""

    @property
    def ingested(self) -> int:
        return len(self.ids)

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[IngestOutcome]) -> "UploadResult":
        return cls(
            ids=[o.encounter_id for o in outcomes],
            created=sum(1 for o in outcomes if o.created),
        )


class UploadService:
    """전투 기록 업로드/중복 확인"""

    @staticmethod
    async def upload_encounters(
        user_id: int,
        encounters: Sequence[EncounterIn],
        config: DedupConfig = DEDUP,
    ) -> UploadResult:
        """
        전투 기록 배치 업로드

        Args:
            user_id: 업로더 ID
            encounters: 업로드할 전투 기록 (최대 10개)
            config: 중복 판정 설정

        Returns:
            UploadResult

        Raises:
            EmptyUploadError: 빈 배치
            UploadBatchTooLargeError: 개수 초과
            StorageFailureError: 트랜잭션 실패 (전체 롤백)
        """
        if not encounters:
            raise EmptyUploadError()
        if len(encounters) > UPLOAD.MAX_ENCOUNTERS_PER_UPLOAD:
            raise UploadBatchTooLargeError(len(encounters), UPLOAD.MAX_ENCOUNTERS_PER_UPLOAD)

        try:
            async with in_transaction() as conn:
                pipeline = DedupPipeline(TortoiseEncounterStore(conn), config)
                outcomes = await pipeline.ingest_batch(user_id, encounters)
        except BaseORMException as e:
            logger.error(f"전투 기록 업로드 실패: user={user_id}, count={len(encounters)}", exc_info=True)
            raise StorageFailureError("전투 기록 업로드") from e

        result = UploadResult.from_outcomes(outcomes)
        logger.info(
            f"전투 기록 업로드: user={user_id}, 입력 {len(encounters)}개, "
            f"신규 {result.created}개, 중복 {result.ingested - result.created}개"
        )
        return result

    @staticmethod
    async def check_hashes(hashes: Sequence[str]) -> CheckHashesResponse:
        """
        업로드 전 중복 확인

        fingerprint와 source_hash 양쪽을 조회합니다.

        Args:
            hashes: 확인할 해시 목록 (최대 50개)

        Returns:
            duplicates(입력 순서, 해시당 첫 매칭)와 missing
        """
        if len(hashes) > UPLOAD.MAX_CHECK_HASHES:
            raise TooManyHashesError(len(hashes), UPLOAD.MAX_CHECK_HASHES)

        try:
            encounters = await encounter_repo.find_by_hashes(hashes)
        except BaseORMException as e:
            raise StorageFailureError("중복 확인") from e

        by_hash = {}
        for encounter in encounters:
            for value in (encounter.fingerprint, encounter.source_hash):
                if value and value not in by_hash:
                    by_hash[value] = encounter.id

        duplicates = []
        missing = []
        for value in hashes:
            if value in by_hash:
                duplicates.append(DuplicateHash(hash=value, encounter_id=by_hash[value]))
            else:
                missing.append(value)

        return CheckHashesResponse(duplicates=duplicates, missing=missing)
