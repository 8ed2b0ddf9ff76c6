"""
Encounter Repository

전투 기록 조회/저장 레이어입니다.
모든 함수는 업로드 트랜잭션 안에서 호출될 수 있도록 using_db를 받습니다.
"""
from datetime import datetime
from typing import List, Optional, Sequence

from tortoise.expressions import F, Q

from DTO.upload import DetailedPlayerDataIn, EncounterIn, EntityIn
from models import (
    ActorEncounterStat, Attempt, DamageSkillStat, DeathEvent, DetailedPlayerData,
    Encounter, EncounterBoss, EncounterPhase, Entity, HealSkillStat, User,
)
from utils.time_util import ms_to_datetime, optional_ms_to_datetime


async def find_exact_duplicate(
    fingerprint: str,
    source_hash: Optional[str] = None,
    using_db=None,
) -> Optional[int]:
    """
    fingerprint 또는 source_hash가 일치하는 기존 기록 조회 (사용자 무관)

    Args:
        fingerprint: 새 기록의 fingerprint
        source_hash: 클라이언트 멱등성 토큰 (없으면 fingerprint만 비교)
        using_db: 트랜잭션 커넥션

    Returns:
        기존 encounter ID 또는 None
    """
    condition = Q(fingerprint=fingerprint)
    if source_hash:
        condition = condition | Q(source_hash=source_hash)

    row = await (
        Encounter.filter(condition)
        .using_db(using_db)
        .order_by("id")
        .first()
        .values("id")
    )
    return row["id"] if row else None


async def find_fuzzy_candidates(player_set_hash: str, using_db=None) -> List[Encounter]:
    """
    같은 플레이어 집합을 가진 기록을 players/bosses/attempts와 함께 조회

    Args:
        player_set_hash: 플레이어 집합 해시
        using_db: 트랜잭션 커넥션

    Returns:
        id 오름차순 Encounter 목록
    """
    return await (
        Encounter.filter(player_set_hash=player_set_hash)
        .using_db(using_db)
        .order_by("id")
        .prefetch_related("players", "bosses", "attempts")
    )


async def create_encounter(
    user_id: int,
    payload: EncounterIn,
    fingerprint: str,
    player_set_hash: str,
    using_db=None,
) -> Encounter:
    """
    전투 기록과 하위 행 전체 저장

    fingerprint 유니크 제약 위반 시 IntegrityError가 그대로 올라갑니다.

    Args:
        user_id: 업로더 ID
        payload: 업로드 원본
        fingerprint: 계산된 fingerprint
        player_set_hash: 계산된 플레이어 집합 해시
        using_db: 트랜잭션 커넥션

    Returns:
        생성된 Encounter
    """
    started_at = ms_to_datetime(payload.started_at_ms)
    ended_at = optional_ms_to_datetime(payload.ended_at_ms)
    duration = (ended_at - started_at).total_seconds() if ended_at else 0

    encounter = await Encounter.create(
        user_id=user_id,
        started_at=started_at,
        ended_at=ended_at,
        duration=max(duration, 0),
        local_player_id=payload.local_player_id,
        total_dmg=payload.total_dmg or 0,
        total_heal=payload.total_heal or 0,
        scene_id=payload.scene_id,
        scene_name=payload.scene_name,
        source_hash=payload.source_hash,
        fingerprint=fingerprint,
        player_set_hash=player_set_hash,
        using_db=using_db,
    )

    await _create_children(encounter, payload, using_db)
    await upsert_entities(payload.entities, started_at, using_db=using_db)
    await upsert_detailed_player_data(user_id, payload.detailed_player_data, using_db=using_db)
    return encounter


async def _create_children(encounter: Encounter, payload: EncounterIn, using_db) -> None:
    if payload.attempts:
        await Attempt.bulk_create([
            Attempt(
                encounter=encounter,
                attempt_index=a.attempt_index,
                started_at=ms_to_datetime(a.started_at_ms),
                ended_at=optional_ms_to_datetime(a.ended_at_ms),
                reason=a.reason,
                boss_hp_start=a.boss_hp_start,
                boss_hp_end=a.boss_hp_end,
                total_deaths=a.total_deaths,
            )
            for a in payload.attempts
        ], using_db=using_db)

    if payload.phases:
        await EncounterPhase.bulk_create([
            EncounterPhase(
                encounter=encounter,
                phase_type=p.phase_type,
                start_time=ms_to_datetime(p.start_time_ms),
                end_time=optional_ms_to_datetime(p.end_time_ms),
                outcome=p.outcome,
            )
            for p in payload.phases
        ], using_db=using_db)

    if payload.death_events:
        await DeathEvent.bulk_create([
            DeathEvent(
                encounter=encounter,
                timestamp=ms_to_datetime(d.timestamp_ms),
                actor_id=d.actor_id,
                killer_id=d.killer_id,
                skill_id=d.skill_id,
                is_local_player=d.is_local_player,
                attempt_index=d.attempt_index,
            )
            for d in payload.death_events
        ], using_db=using_db)

    if payload.actor_encounter_stats:
        await ActorEncounterStat.bulk_create([
            ActorEncounterStat(
                encounter=encounter,
                actor_id=s.actor_id,
                class_spec=s.class_spec,
                damage_dealt=s.damage_dealt,
                heal_dealt=s.heal_dealt,
                damage_taken=s.damage_taken,
                hits_dealt=s.hits_dealt,
                hits_heal=s.hits_heal,
                hits_taken=s.hits_taken,
                crit_hits_dealt=s.crit_hits_dealt or 0,
                crit_total_dealt=s.crit_total_dealt or 0,
                lucky_hits_dealt=s.lucky_hits_dealt or 0,
                lucky_total_dealt=s.lucky_total_dealt or 0,
                boss_damage_dealt=s.boss_damage_dealt or 0,
                boss_hits_dealt=s.boss_hits_dealt or 0,
                dps=s.dps or 0,
                duration=s.duration or 0,
                name=s.name,
                class_id=s.class_id,
                ability_score=s.ability_score,
                level=s.level,
                is_player=s.is_player,
                is_local_player=s.is_local_player,
                attributes=s.attributes,
                revives=s.revives or 0,
            )
            for s in payload.actor_encounter_stats
        ], using_db=using_db)

    if payload.damage_skill_stats:
        await DamageSkillStat.bulk_create([
            DamageSkillStat(encounter=encounter, **d.model_dump())
            for d in payload.damage_skill_stats
        ], using_db=using_db)

    if payload.heal_skill_stats:
        await HealSkillStat.bulk_create([
            HealSkillStat(encounter=encounter, **h.model_dump())
            for h in payload.heal_skill_stats
        ], using_db=using_db)

    if payload.encounter_bosses:
        await EncounterBoss.bulk_create([
            EncounterBoss(encounter=encounter, **b.model_dump())
            for b in payload.encounter_bosses
        ], using_db=using_db)


async def upsert_entities(entities: Sequence[EntityIn], seen_at: datetime, using_db=None) -> None:
    """
    entity_id 기준으로 Entity 갱신 (없으면 생성)

    Args:
        entities: 업로드된 엔티티 목록
        seen_at: 전투 시작 시각
        using_db: 트랜잭션 커넥션
    """
    for e in entities:
        if e.entity_id is None:
            continue

        snapshot = e.model_dump(exclude={"entity_id"}, exclude_none=True)
        entity = await Entity.filter(entity_id=e.entity_id).using_db(using_db).first()
        if entity is None:
            await Entity.create(
                entity_id=e.entity_id,
                first_seen=seen_at,
                last_seen=seen_at,
                using_db=using_db,
                **snapshot,
            )
            continue

        for field_name, value in snapshot.items():
            setattr(entity, field_name, value)
        entity.last_seen = seen_at
        await entity.save(using_db=using_db)


async def upsert_detailed_player_data(
    user_id: int,
    rows: Sequence[DetailedPlayerDataIn],
    using_db=None,
) -> None:
    """
    player_id 기준으로 상세 정보 갱신

    이미 더 최신(last_seen_ms가 큰) 데이터가 있으면 건너뜁니다.
    """
    for row in rows:
        existing = await DetailedPlayerData.filter(player_id=row.player_id).using_db(using_db).first()
        if existing is None:
            await DetailedPlayerData.create(user_id=user_id, using_db=using_db, **row.model_dump())
            continue

        if existing.last_seen_ms > row.last_seen_ms:
            continue

        existing.user_id = user_id
        existing.last_seen_ms = row.last_seen_ms
        existing.char_serialize_json = row.char_serialize_json
        existing.profession_list_json = row.profession_list_json
        existing.talent_node_ids_json = row.talent_node_ids_json
        await existing.save(using_db=using_db)


async def increment_upload_counter(user_id: int, count: int, using_db=None) -> None:
    """사용자 업로드 카운터 증가"""
    if count <= 0:
        return
    await User.filter(id=user_id).using_db(using_db).update(
        encounters_uploaded=F("encounters_uploaded") + count
    )


async def find_by_hashes(hashes: Sequence[str]) -> List[Encounter]:
    """
    fingerprint 또는 source_hash가 주어진 해시 중 하나와 일치하는 기록 조회

    Returns:
        id 오름차순 Encounter 목록
    """
    if not hashes:
        return []
    return await (
        Encounter.filter(Q(fingerprint__in=list(hashes)) | Q(source_hash__in=list(hashes)))
        .order_by("id")
    )
