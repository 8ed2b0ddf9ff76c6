"""
전투 기록 업로드 DTO

클라이언트가 보내는 JSON(camelCase)을 그대로 받는 스키마입니다.
ID는 서버가 부여하므로 입력에 포함되지 않습니다.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase JSON ↔ snake_case 필드"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttemptIn(CamelModel):
    attempt_index: int
    started_at_ms: int
    ended_at_ms: Optional[int] = None
    reason: Optional[str] = None
    boss_hp_start: Optional[int] = None
    boss_hp_end: Optional[int] = None
    total_deaths: int = 0


class PhaseIn(CamelModel):
    phase_type: str = Field(pattern="^(mob|boss)$")
    start_time_ms: int
    end_time_ms: Optional[int] = None
    outcome: str = Field(default="unknown", pattern="^(success|wipe|unknown)$")


class DeathEventIn(CamelModel):
    timestamp_ms: int
    actor_id: int
    killer_id: Optional[int] = None
    skill_id: Optional[int] = None
    is_local_player: bool = False
    attempt_index: int = 1


class ActorEncounterStatIn(CamelModel):
    actor_id: int
    class_spec: Optional[int] = None
    damage_dealt: int = 0
    heal_dealt: int = 0
    damage_taken: int = 0
    hits_dealt: int = 0
    hits_heal: int = 0
    hits_taken: int = 0

    crit_hits_dealt: Optional[int] = None
    crit_total_dealt: Optional[int] = None
    lucky_hits_dealt: Optional[int] = None
    lucky_total_dealt: Optional[int] = None

    boss_damage_dealt: Optional[int] = None
    boss_hits_dealt: Optional[int] = None

    dps: Optional[float] = None
    duration: Optional[float] = None

    name: Optional[str] = None
    class_id: Optional[int] = None
    ability_score: Optional[int] = None
    level: Optional[int] = None
    is_player: bool = False
    is_local_player: bool = False
    attributes: Optional[dict] = None
    revives: Optional[int] = None


class DamageSkillStatIn(CamelModel):
    attacker_id: int
    defender_id: Optional[int] = None
    skill_id: int
    hits: int = 0
    total_value: int = 0
    crit_hits: int = 0
    lucky_hits: int = 0
    crit_total: int = 0
    lucky_total: int = 0
    hp_loss_total: int = 0
    shield_loss_total: int = 0
    monster_name: Optional[str] = None


class HealSkillStatIn(CamelModel):
    healer_id: int
    target_id: Optional[int] = None
    skill_id: int
    hits: int = 0
    total_value: int = 0
    crit_hits: int = 0
    lucky_hits: int = 0
    crit_total: int = 0
    lucky_total: int = 0
    monster_name: Optional[str] = None


class EntityIn(CamelModel):
    entity_id: Optional[int] = None
    name: Optional[str] = None
    class_id: Optional[int] = None
    class_spec: Optional[int] = None
    ability_score: Optional[int] = None
    level: Optional[int] = None


class EncounterBossIn(CamelModel):
    monster_name: str
    hits: int = 0
    total_damage: int = 0
    max_hp: Optional[int] = None
    is_defeated: bool = False


class DetailedPlayerDataIn(CamelModel):
    player_id: int
    last_seen_ms: int
    char_serialize_json: str
    profession_list_json: Optional[str] = None
    talent_node_ids_json: Optional[str] = None


class EncounterIn(CamelModel):
    """업로드되는 전투 기록 한 건"""

    started_at_ms: int
    ended_at_ms: Optional[int] = None
    local_player_id: Optional[int] = None
    total_dmg: Optional[int] = None
    total_heal: Optional[int] = None
    scene_id: Optional[int] = None
    scene_name: Optional[str] = None
    source_hash: Optional[str] = Field(default=None, max_length=64)

    attempts: list[AttemptIn] = Field(default_factory=list)
    phases: list[PhaseIn] = Field(default_factory=list)
    death_events: list[DeathEventIn] = Field(default_factory=list)
    actor_encounter_stats: list[ActorEncounterStatIn] = Field(default_factory=list)
    damage_skill_stats: list[DamageSkillStatIn] = Field(default_factory=list)
    heal_skill_stats: list[HealSkillStatIn] = Field(default_factory=list)
    entities: list[EntityIn] = Field(default_factory=list)
    encounter_bosses: list[EncounterBossIn] = Field(default_factory=list)
    detailed_player_data: list[DetailedPlayerDataIn] = Field(default_factory=list)


class UploadEncountersRequest(CamelModel):
    schema_version: Optional[int] = None
    encounters: list[EncounterIn]


class UploadEncountersResponse(CamelModel):
    ingested: int
    """처리된 입력 수 (새로 저장 + 기존 기록으로 합쳐진 것)"""

    created: int
    """새로 저장된 전투 기록 수"""

    ids: list[int]
    """encounters[i]에 대응하는 저장 ID"""


class CheckHashesRequest(CamelModel):
    hashes: list[str]


class DuplicateHash(CamelModel):
    hash: str
    encounter_id: int


class CheckHashesResponse(CamelModel):
    duplicates: list[DuplicateHash]
    missing: list[str]
