"""보스 시도 기록 모델"""
from tortoise import fields
from tortoise.models import Model


class Attempt(Model):
    id = fields.BigIntField(pk=True)
    encounter = fields.ForeignKeyField(
        "models.Encounter",
        related_name="attempts",
        on_delete=fields.CASCADE
    )
    attempt_index = fields.IntField()
    started_at = fields.DatetimeField()
    ended_at = fields.DatetimeField(null=True)
    reason = fields.CharField(max_length=32, null=True)
    """종료 사유 (wipe, clear 등)"""

    boss_hp_start = fields.BigIntField(null=True)
    boss_hp_end = fields.BigIntField(null=True)
    total_deaths = fields.IntField(default=0)

    class Meta:
        table = "attempts"
