"""
Entity 모델 (전역 테이블)

전투 기록과 무관하게 entity_id 기준으로 한 행만 유지하며,
업로드 때마다 last_seen과 최신 정보로 갱신됩니다.
"""
from tortoise import fields
from tortoise.models import Model


class Entity(Model):
    id = fields.BigIntField(pk=True)
    entity_id = fields.BigIntField(null=True, unique=True)
    name = fields.CharField(max_length=255, null=True)
    class_id = fields.BigIntField(null=True)
    class_spec = fields.BigIntField(null=True)
    ability_score = fields.BigIntField(null=True)
    level = fields.IntField(null=True)
    first_seen = fields.DatetimeField(null=True)
    last_seen = fields.DatetimeField(null=True)

    class Meta:
        table = "entities"
