"""전투 보스 모델"""
from tortoise import fields
from tortoise.models import Model


class EncounterBoss(Model):
    id = fields.BigIntField(pk=True)
    encounter = fields.ForeignKeyField(
        "models.Encounter",
        related_name="bosses",
        on_delete=fields.CASCADE
    )
    monster_name = fields.CharField(max_length=255)
    hits = fields.BigIntField(default=0)
    total_damage = fields.BigIntField(default=0)
    max_hp = fields.BigIntField(null=True)
    is_defeated = fields.BooleanField(default=False)

    class Meta:
        table = "encounter_bosses"
