"""플레이어 상세 정보 모델 (player_id 기준 upsert)"""
from tortoise import fields
from tortoise.models import Model


class DetailedPlayerData(Model):
    player_id = fields.BigIntField(pk=True, generated=False)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="detailed_player_data",
        null=True,
        on_delete=fields.SET_NULL
    )
    last_seen_ms = fields.BigIntField()
    char_serialize_json = fields.TextField()
    profession_list_json = fields.TextField(null=True)
    talent_node_ids_json = fields.TextField(null=True)

    class Meta:
        table = "detailed_player_data"
