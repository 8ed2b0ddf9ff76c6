"""
Encounter 모델 정의

클라이언트가 요약해서 올린 전투 기록 한 건입니다.
fingerprint는 전역 유일, player_set_hash는 퍼지 후보 조회용 인덱스입니다.
"""
from tortoise import fields
from tortoise.models import Model


class Encounter(Model):
    id = fields.BigIntField(pk=True)

    started_at = fields.DatetimeField()
    ended_at = fields.DatetimeField(null=True)
    duration = fields.FloatField(default=0)
    local_player_id = fields.BigIntField(null=True, index=True)
    total_dmg = fields.BigIntField(default=0)
    total_heal = fields.BigIntField(default=0)
    scene_id = fields.BigIntField(null=True)
    scene_name = fields.CharField(max_length=255, null=True)

    # 중복 제거
    source_hash = fields.CharField(max_length=64, null=True, index=True)
    """클라이언트가 보낸 멱등성 토큰"""

    fingerprint = fields.CharField(max_length=64, null=True, unique=True)
    """장면/보스/플레이어 딜 비율/시도 수/시작 버킷의 SHA-256"""

    player_set_hash = fields.CharField(max_length=64, null=True, index=True)
    """플레이어 ID 집합의 SHA-256 (퍼지 후보 조회용)"""

    user = fields.ForeignKeyField("models.User", related_name="encounters")
    """최초 업로더"""

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "encounters"

    def __str__(self):
        return f"Encounter({self.id} scene={self.scene_id or self.scene_name})"
