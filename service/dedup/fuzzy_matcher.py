"""
퍼지 중복 판정

fingerprint가 달라도 (시작 버킷 경계, 딜 미세 차이 등)
같은 전투로 볼 수 있는지 유사도를 계산합니다.
"""
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from config.dedup import DEDUP, DedupConfig
from service.dedup.encounter_summary import EncounterSummary, PersistedEncounter
from service.dedup.fingerprint import (
    normalize_name, normalized_bosses, player_damage_shares, sorted_player_ids,
)


@dataclass(frozen=True)
class FuzzySimilarity:
    """두 전투 기록의 유사도"""

    scene_match: bool
    boss_match: bool
    player_set_match: bool
    damage_l1_norm: float
    """플레이어별 딜 비율 차이 합 (플레이어 집합이 다르면 inf)"""

    total_damage_diff: float
    """총 딜 상대 차이"""

    start_time_delta: float
    """시작 시각 차이 (초)"""

    attempt_count_match: bool


def _scene_match(a: EncounterSummary, b: PersistedEncounter) -> bool:
    if a.scene_id is not None and b.scene_id is not None:
        return a.scene_id == b.scene_id
    if a.scene_name and b.scene_name:
        return normalize_name(a.scene_name) == normalize_name(b.scene_name)
    return False


def _total_damage_diff(a: int, b: int) -> float:
    if a > 0 and b > 0:
        return abs(a - b) / ((a + b) / 2)
    if a == 0 and b == 0:
        return 0.0
    return 1.0


def compute_similarity(new: EncounterSummary, existing: PersistedEncounter) -> FuzzySimilarity:
    """
    새 업로드와 저장된 기록의 유사도 계산

    Args:
        new: 업로드된 전투 요약
        existing: players/bosses/attempts가 로드된 저장 기록

    Returns:
        FuzzySimilarity
    """
    player_set_match = sorted_player_ids(new.actors) == sorted_player_ids(existing.actors)

    if player_set_match:
        shares_a = player_damage_shares(new.actors, new.total_dmg)
        shares_b = player_damage_shares(existing.actors, existing.total_dmg)
        damage_l1 = sum(abs(sa - sb) for (_, sa), (_, sb) in zip(shares_a, shares_b))
    else:
        damage_l1 = math.inf

    return FuzzySimilarity(
        scene_match=_scene_match(new, existing),
        boss_match=normalized_bosses(new.bosses) == normalized_bosses(existing.bosses),
        player_set_match=player_set_match,
        damage_l1_norm=damage_l1,
        total_damage_diff=_total_damage_diff(new.total_dmg or 0, existing.total_dmg or 0),
        start_time_delta=abs(new.started_at_seconds - existing.started_at_seconds),
        attempt_count_match=new.attempts_count == existing.attempts_count,
    )


def is_fuzzy_duplicate(similarity: FuzzySimilarity, config: DedupConfig = DEDUP) -> bool:
    """모든 조건을 만족해야 중복"""
    return (
        similarity.scene_match
        and similarity.boss_match
        and similarity.player_set_match
        and similarity.damage_l1_norm <= config.DAMAGE_L1_THRESHOLD
        and similarity.total_damage_diff <= config.TOTAL_DAMAGE_PCT_DIFF
        and similarity.start_time_delta <= config.START_TIME_DELTA_SECONDS
        and similarity.attempt_count_match
    )


def find_fuzzy_match(
    new: EncounterSummary,
    candidates: Iterable[PersistedEncounter],
    config: DedupConfig = DEDUP,
) -> Optional[PersistedEncounter]:
    """
    후보 중 첫 번째 중복 반환

    Returns:
        중복으로 판정된 기록 또는 None
    """
    for candidate in candidates:
        if is_fuzzy_duplicate(compute_similarity(new, candidate), config):
            return candidate
    return None
