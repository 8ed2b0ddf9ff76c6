"""
최적화 결과 캐시 모델

(user_id, request_hash) 기준으로 최신 미만료 행을 캐시로 사용합니다.
"""
from datetime import datetime, timedelta, timezone

from tortoise import fields
from tortoise.models import Model

from config.module_optimizer import OPTIMIZATION_CACHE


class OptimizationResult(Model):
    id = fields.IntField(pk=True)

    user = fields.ForeignKeyField(
        "models.User",
        related_name="optimization_results",
        on_delete=fields.CASCADE
    )

    request_hash = fields.CharField(max_length=32)
    """정규화된 요청 파라미터의 SHA-256 앞 16바이트"""

    # 요청 스냅샷 (히스토리 표시용)
    category = fields.CharField(max_length=20)
    priority_attributes = fields.JSONField(null=True)
    desired_levels = fields.JSONField(null=True)
    excluded_attributes = fields.JSONField(null=True)
    sort_mode = fields.CharField(max_length=20)
    max_solutions = fields.IntField()

    combinations = fields.JSONField()
    """응답 solutions 직렬화 결과"""

    total_modules = fields.IntField(default=0)
    processing_time_ms = fields.IntField()

    created_at = fields.DatetimeField(auto_now_add=True, index=True)
    expires_at = fields.DatetimeField(index=True)

    class Meta:
        table = "optimization_results"
        indexes = (
            ("user_id", "request_hash", "expires_at"),  # 캐시 조회
        )

    @staticmethod
    def calculate_expires_at(now: datetime = None) -> datetime:
        """만료 시각 계산 (TTL_HOURS 후)"""
        now = now or datetime.now(timezone.utc)
        return now + timedelta(hours=OPTIMIZATION_CACHE.TTL_HOURS)
