"""
중복 판정용 전투 요약

업로드 DTO와 저장된 Encounter를 같은 형태로 맞춰
fingerprint 계산과 퍼지 비교가 ORM에 의존하지 않도록 합니다.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from DTO.upload import EncounterIn
from utils.time_util import as_utc


@dataclass(frozen=True)
class ActorSummary:
    actor_id: int
    damage_dealt: int
    is_player: bool


@dataclass(frozen=True)
class EncounterSummary:
    """업로드된 전투 요약"""

    started_at_ms: int
    total_dmg: Optional[int] = None
    scene_id: Optional[int] = None
    scene_name: Optional[str] = None
    bosses: Tuple[str, ...] = ()
    actors: Tuple[ActorSummary, ...] = ()
    attempts_count: int = 0
    source_hash: Optional[str] = None

    @property
    def started_at_seconds(self) -> float:
        return self.started_at_ms / 1000

    @classmethod
    def from_upload(cls, payload: EncounterIn) -> "EncounterSummary":
        return cls(
            started_at_ms=payload.started_at_ms,
            total_dmg=payload.total_dmg,
            scene_id=payload.scene_id,
            scene_name=payload.scene_name,
            bosses=tuple(b.monster_name for b in payload.encounter_bosses),
            actors=tuple(
                ActorSummary(s.actor_id, s.damage_dealt, s.is_player)
                for s in payload.actor_encounter_stats
            ),
            attempts_count=len(payload.attempts),
            source_hash=payload.source_hash,
        )


@dataclass(frozen=True)
class PersistedEncounter:
    """
    저장된 전투 기록 (퍼지 비교 대상)

    players/bosses/attempts가 미리 로드된 Encounter에서 만듭니다.
    """

    id: int
    started_at: datetime
    total_dmg: int = 0
    scene_id: Optional[int] = None
    scene_name: Optional[str] = None
    bosses: Tuple[str, ...] = ()
    actors: Tuple[ActorSummary, ...] = ()
    attempts_count: int = 0
    ended_at: Optional[datetime] = None
    fingerprint: Optional[str] = None
    player_set_hash: Optional[str] = None

    @property
    def started_at_seconds(self) -> float:
        return as_utc(self.started_at).timestamp()

    @classmethod
    def from_model(cls, encounter) -> "PersistedEncounter":
        return cls(
            id=encounter.id,
            started_at=encounter.started_at,
            ended_at=encounter.ended_at,
            total_dmg=encounter.total_dmg or 0,
            scene_id=encounter.scene_id,
            scene_name=encounter.scene_name,
            bosses=tuple(b.monster_name for b in encounter.bosses),
            actors=tuple(
                ActorSummary(p.actor_id, p.damage_dealt, p.is_player)
                for p in encounter.players
            ),
            attempts_count=len(encounter.attempts),
            fingerprint=encounter.fingerprint,
            player_set_hash=encounter.player_set_hash,
        )
