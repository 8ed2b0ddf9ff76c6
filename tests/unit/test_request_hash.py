"""
최적화 요청 해시 유닛 테스트
"""
import hashlib
import re

from service.module_optimizer.cache import generate_request_hash
from service.module_optimizer.calculator import OptimizationPreferences


class TestGenerateRequestHash:
    """요청 해시 테스트"""

    def test_format(self):
        request_hash = generate_request_hash(1, "ATTACK", None, 10, "ByScore")
        assert re.fullmatch(r"[0-9a-f]{32}", request_hash)

    def test_known_value_without_preferences(self):
        """비어 있는 선호 항목은 생략"""
        expected = hashlib.sha256(b"user:1|cat:ATTACK|max:10|sort:ByScore").digest()[:16].hex()
        assert generate_request_hash(1, "ATTACK", None, 10, "ByScore") == expected
        assert generate_request_hash(1, "ATTACK", OptimizationPreferences(), 10, "ByScore") == expected

    def test_known_value_with_preferences(self):
        prefs = OptimizationPreferences(
            priority_attributes=("Might", "Agility"),
            desired_levels={"Might": 5, "Agility": 3},
            excluded_attributes=("Luck Focus",),
        )
        raw = "user:7|cat:DEFENSE|priority:Might,Agility|levels:Agility=3,Might=5|excluded:Luck Focus|max:5|sort:ByTotalAttr"
        expected = hashlib.sha256(raw.encode("utf-8")).digest()[:16].hex()
        assert generate_request_hash(7, "DEFENSE", prefs, 5, "ByTotalAttr") == expected

    def test_levels_order_independent(self):
        a = OptimizationPreferences(priority_attributes=("Might",), desired_levels={"Might": 5, "Agility": 3})
        b = OptimizationPreferences(priority_attributes=("Might",), desired_levels={"Agility": 3, "Might": 5})
        assert generate_request_hash(1, "ATTACK", a, 10, "ByScore") == generate_request_hash(1, "ATTACK", b, 10, "ByScore")

    def test_user_scoped(self):
        assert generate_request_hash(1, "ATTACK", None, 10, "ByScore") != generate_request_hash(2, "ATTACK", None, 10, "ByScore")

    def test_sensitive_to_constraints(self):
        base = generate_request_hash(1, "ATTACK", None, 10, "ByScore")
        assert base != generate_request_hash(1, "ATTACK", None, 11, "ByScore")
        assert base != generate_request_hash(1, "ATTACK", None, 10, "ByTotalAttr")
        assert base != generate_request_hash(1, "SUPPORT", None, 10, "ByScore")
