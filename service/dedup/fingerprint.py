"""
전투 기록 fingerprint

같은 실제 전투를 여러 사람이 올려도 같은 값이 나오도록
정규화 문자열을 만든 뒤 SHA-256으로 요약합니다.

정규화 순서 (| 로 연결):
    scene_id:<n> | scene_name:<이름> | scene:unknown
    bosses:<정렬된 이름들> | bosses:none
    players:<actor_id:딜비율%> | players:none
    attempts:<시도 수>
    start_bucket:<floor(시작초 / 버킷)>
"""
import hashlib
from typing import Iterable, List, Optional, Tuple, Union

from config.dedup import DEDUP, DedupConfig
from service.dedup.encounter_summary import ActorSummary, EncounterSummary, PersistedEncounter

Summary = Union[EncounterSummary, PersistedEncounter]


def normalize_name(name: str) -> str:
    return name.strip().lower()


def normalized_bosses(bosses: Iterable[str]) -> List[str]:
    """소문자/공백 제거 후 정렬"""
    return sorted(normalize_name(b) for b in bosses)


def sorted_player_ids(actors: Iterable[ActorSummary]) -> List[int]:
    return sorted(a.actor_id for a in actors if a.is_player)


def damage_share(damage_dealt: int, total_dmg: Optional[int]) -> float:
    """플레이어 딜 비율 (0~1). 총 딜이 없으면 0"""
    if not total_dmg or total_dmg <= 0:
        return 0.0
    return damage_dealt / total_dmg


def player_damage_shares(
    actors: Iterable[ActorSummary],
    total_dmg: Optional[int],
) -> List[Tuple[int, float]]:
    """
    (actor_id, 딜 비율) 목록, actor_id 오름차순

    NPC는 제외합니다.
    """
    players = sorted((a for a in actors if a.is_player), key=lambda a: a.actor_id)
    return [(a.actor_id, damage_share(a.damage_dealt, total_dmg)) for a in players]


def _scene_segment(summary: Summary) -> str:
    if summary.scene_id is not None:
        return f"scene_id:{summary.scene_id}"
    if summary.scene_name:
        return f"scene_name:{normalize_name(summary.scene_name)}"
    return "scene:unknown"


def _bosses_segment(summary: Summary) -> str:
    bosses = normalized_bosses(summary.bosses)
    if not bosses:
        return "bosses:none"
    return "bosses:" + ",".join(bosses)


def _players_segment(summary: Summary) -> str:
    shares = player_damage_shares(summary.actors, summary.total_dmg)
    if not shares:
        return "players:none"

    # 퍼센트 소수 둘째 자리 (round는 half-to-even)
    entries = [
        f"{actor_id}:{round(share * 10000) / 100:.2f}"
        for actor_id, share in shares
    ]
    return "players:" + ",".join(entries)


def start_bucket(started_at_seconds: float, config: DedupConfig = DEDUP) -> int:
    """epoch 기준 시작 시각 버킷"""
    return int(started_at_seconds // config.START_TIME_BUCKET_SECONDS)


def build_canonical_string(summary: Summary, config: DedupConfig = DEDUP) -> str:
    segments = [
        _scene_segment(summary),
        _bosses_segment(summary),
        _players_segment(summary),
        f"attempts:{summary.attempts_count}",
        f"start_bucket:{start_bucket(summary.started_at_seconds, config)}",
    ]
    return "|".join(segments)


def compute_fingerprint(summary: Summary, config: DedupConfig = DEDUP) -> str:
    """
    전투 fingerprint 계산

    Args:
        summary: 전투 요약
        config: 버킷 크기 등 설정

    Returns:
        64자리 소문자 hex
    """
    canonical = build_canonical_string(summary, config)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_player_set_hash(summary: Summary) -> str:
    """플레이어 ID 집합 해시 (퍼지 후보 조회 키)"""
    joined = ",".join(str(actor_id) for actor_id in sorted_player_ids(summary.actors))
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()
