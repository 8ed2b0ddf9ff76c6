"""
User 모델 정의

업로드/최적화 요청의 주체가 되는 사용자입니다.
"""
from tortoise import models, fields


class User(models.Model):
    id = fields.IntField(pk=True)
    username = fields.CharField(max_length=255)
    api_key = fields.CharField(max_length=64, unique=True)
    """X-Api-Key 헤더로 전달되는 업로드/조회 키"""

    encounters_uploaded = fields.IntField(default=0)
    """새로 저장된 전투 기록 수 (중복으로 합쳐진 건 제외)"""

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"
