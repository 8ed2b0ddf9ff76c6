"""
전투 참여자 통계 모델

플레이어와 NPC가 모두 들어가며, is_player=True 행만 중복 판정에 쓰입니다.
"""
from tortoise import fields
from tortoise.models import Model


class ActorEncounterStat(Model):
    id = fields.BigIntField(pk=True)
    encounter = fields.ForeignKeyField(
        "models.Encounter",
        related_name="players",
        on_delete=fields.CASCADE
    )
    actor_id = fields.BigIntField(index=True)
    class_spec = fields.BigIntField(null=True)

    # 기본 수치
    damage_dealt = fields.BigIntField(default=0)
    heal_dealt = fields.BigIntField(default=0)
    damage_taken = fields.BigIntField(default=0)
    hits_dealt = fields.BigIntField(default=0)
    hits_heal = fields.BigIntField(default=0)
    hits_taken = fields.BigIntField(default=0)

    # 치명 / 행운
    crit_hits_dealt = fields.BigIntField(default=0)
    crit_total_dealt = fields.BigIntField(default=0)
    lucky_hits_dealt = fields.BigIntField(default=0)
    lucky_total_dealt = fields.BigIntField(default=0)

    # 보스 대상
    boss_damage_dealt = fields.BigIntField(default=0)
    boss_hits_dealt = fields.BigIntField(default=0)

    # 성능 스냅샷
    dps = fields.FloatField(default=0)
    duration = fields.FloatField(default=0)

    name = fields.CharField(max_length=255, null=True)
    class_id = fields.BigIntField(null=True)
    ability_score = fields.BigIntField(null=True)
    level = fields.IntField(null=True)
    is_player = fields.BooleanField(default=False)
    is_local_player = fields.BooleanField(default=False)
    attributes = fields.JSONField(null=True)
    revives = fields.BigIntField(default=0)

    class Meta:
        table = "actor_encounter_stats"
