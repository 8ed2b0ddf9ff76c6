"""스킬별 치유 통계 모델"""
from tortoise import fields
from tortoise.models import Model


class HealSkillStat(Model):
    id = fields.BigIntField(pk=True)
    encounter = fields.ForeignKeyField(
        "models.Encounter",
        related_name="heal_skill_stats",
        on_delete=fields.CASCADE
    )
    healer_id = fields.BigIntField(index=True)
    target_id = fields.BigIntField(null=True, index=True)
    skill_id = fields.BigIntField(index=True)
    hits = fields.BigIntField(default=0)
    total_value = fields.BigIntField(default=0)
    crit_hits = fields.BigIntField(default=0)
    lucky_hits = fields.BigIntField(default=0)
    crit_total = fields.BigIntField(default=0)
    lucky_total = fields.BigIntField(default=0)
    monster_name = fields.CharField(max_length=255, null=True)

    class Meta:
        table = "heal_skill_stats"
