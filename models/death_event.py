"""사망 이벤트 모델"""
from tortoise import fields
from tortoise.models import Model


class DeathEvent(Model):
    id = fields.BigIntField(pk=True)
    encounter = fields.ForeignKeyField(
        "models.Encounter",
        related_name="death_events",
        on_delete=fields.CASCADE
    )
    timestamp = fields.DatetimeField(index=True)
    actor_id = fields.BigIntField()
    killer_id = fields.BigIntField(null=True)
    skill_id = fields.BigIntField(null=True)
    is_local_player = fields.BooleanField(default=False)
    attempt_index = fields.IntField(default=1)

    class Meta:
        table = "death_events"
