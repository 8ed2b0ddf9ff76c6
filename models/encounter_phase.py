"""전투 페이즈 모델 (잡몹 / 보스 구간)"""
from enum import Enum

from tortoise import fields
from tortoise.models import Model


class PhaseType(str, Enum):
    MOB = "mob"
    BOSS = "boss"


class PhaseOutcome(str, Enum):
    SUCCESS = "success"
    WIPE = "wipe"
    UNKNOWN = "unknown"


class EncounterPhase(Model):
    id = fields.BigIntField(pk=True)
    encounter = fields.ForeignKeyField(
        "models.Encounter",
        related_name="phases",
        on_delete=fields.CASCADE
    )
    phase_type = fields.CharEnumField(PhaseType, max_length=10)
    start_time = fields.DatetimeField()
    end_time = fields.DatetimeField(null=True)
    outcome = fields.CharEnumField(PhaseOutcome, max_length=10, default=PhaseOutcome.UNKNOWN)

    class Meta:
        table = "encounter_phases"
