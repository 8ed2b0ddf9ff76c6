"""전투 기록 중복 제거 설정"""
from dataclasses import dataclass


@dataclass(frozen=True)
class DedupConfig:
    """중복 판정 설정 (지문 + 퍼지 매칭)"""

    # 지문
    START_TIME_BUCKET_SECONDS: int = 30
    """시작 시각 버킷 크기 (초, epoch 기준 정렬)"""

    # 퍼지 매칭 임계값
    DAMAGE_L1_THRESHOLD: float = 0.05
    """플레이어별 딜 비율 차이 L1 합 최대값 (0.05 = 5%)"""

    TOTAL_DAMAGE_PCT_DIFF: float = 0.03
    """총 딜량 상대 차이 최대값 (0.03 = 3%)"""

    START_TIME_DELTA_SECONDS: int = 30
    """시작 시각 차이 최대값 (초)"""


DEDUP = DedupConfig()


@dataclass(frozen=True)
class UploadConfig:
    """업로드 요청 제한"""

    MAX_ENCOUNTERS_PER_UPLOAD: int = 10
    """한 번에 업로드 가능한 전투 기록 수"""

    MAX_CHECK_HASHES: int = 50
    """사전 중복 확인 요청당 최대 해시 수"""


UPLOAD = UploadConfig()
