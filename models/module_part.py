"""모듈 속성 모델"""
from tortoise import fields, models

from config.module_optimizer import PartType


class ModulePart(models.Model):
    id = fields.IntField(pk=True)
    module = fields.ForeignKeyField(
        "models.Module",
        related_name="parts",
        on_delete=fields.CASCADE
    )
    part_id = fields.IntField()
    name = fields.CharField(max_length=255)
    value = fields.IntField()
    type = fields.CharEnumField(PartType, max_length=20)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "module_parts"
