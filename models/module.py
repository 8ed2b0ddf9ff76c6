"""
Module 모델 정의

사용자가 보유한 장비 모듈입니다. 모듈 하나는 한 명의 사용자와
하나의 카테고리에 속하며, 속성값은 ModulePart에만 존재합니다.
"""
from enum import Enum

from tortoise import fields, models

from config.module_optimizer import ModuleCategory


class ModuleSource(str, Enum):
    """모듈 등록 경로"""
    MANUAL = "manual"
    IMPORT = "import"


class Module(models.Model):
    id = fields.IntField(pk=True)
    uuid = fields.CharField(max_length=64, unique=True)
    """게임 내 고유 키 (전역 유일)"""

    name = fields.CharField(max_length=255)
    config_id = fields.IntField()
    quality = fields.IntField()
    """품질 1~5"""

    category = fields.CharEnumField(ModuleCategory, max_length=20)
    source = fields.CharEnumField(ModuleSource, max_length=20, default=ModuleSource.MANUAL)

    user = fields.ForeignKeyField(
        "models.User",
        related_name="modules",
        on_delete=fields.CASCADE
    )

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "modules"
        indexes = (
            ("user_id", "category"),  # 카테고리별 보유 모듈 조회
        )

    def __str__(self) -> str:
        return f"Module({self.id} {self.name} q{self.quality})"
