"""스킬별 피해 통계 모델"""
from tortoise import fields
from tortoise.models import Model


class DamageSkillStat(Model):
    id = fields.BigIntField(pk=True)
    encounter = fields.ForeignKeyField(
        "models.Encounter",
        related_name="damage_skill_stats",
        on_delete=fields.CASCADE
    )
    attacker_id = fields.BigIntField(index=True)
    defender_id = fields.BigIntField(null=True, index=True)
    skill_id = fields.BigIntField(index=True)
    hits = fields.BigIntField(default=0)
    total_value = fields.BigIntField(default=0)
    crit_hits = fields.BigIntField(default=0)
    lucky_hits = fields.BigIntField(default=0)
    crit_total = fields.BigIntField(default=0)
    lucky_total = fields.BigIntField(default=0)
    hp_loss_total = fields.BigIntField(default=0)
    shield_loss_total = fields.BigIntField(default=0)
    monster_name = fields.CharField(max_length=255, null=True)

    class Meta:
        table = "damage_skill_stats"
