"""
모듈 조합 전투력 계산

속성 합산값(attr_breakdown) 기준으로 점수와 우선 속성 달성 레벨을 계산합니다.
config/module_optimizer.py의 점수표를 사용하며 모든 함수는 순수 함수입니다.
"""
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Mapping, Optional, Sequence, Tuple

from config.module_optimizer import (
    LEVEL_WEIGHTS, MAX_ATTR_LEVEL, OPTIMIZER,
    calculate_attribute_level, get_attribute_type,
    get_combat_power_for_level, get_combat_power_for_total_attr,
)


@dataclass(frozen=True)
class OptimizationPreferences:
    """최적화 선호 설정"""

    priority_attributes: Tuple[str, ...] = ()
    """우선 속성 (입력 순서 유지)"""

    desired_levels: Dict[str, int] = field(default_factory=dict)
    """우선 속성별 목표 레벨"""

    excluded_attributes: Tuple[str, ...] = ()
    """이 속성을 가진 모듈은 후보에서 제외"""

    @property
    def has_priority(self) -> bool:
        return len(self.priority_attributes) > 0


@lru_cache(maxsize=4096)
def attribute_power(attr_name: str, value: int) -> int:
    """속성 하나의 합산값 → 레벨 전투력"""
    level = calculate_attribute_level(value)
    return get_combat_power_for_level(level, get_attribute_type(attr_name))


class PowerCalculator:
    """전투력 계산기"""

    @staticmethod
    def combat_power(attr_breakdown: Mapping[str, int]) -> float:
        """
        속성별 레벨 전투력 합 + 속성 종류 수 보너스

        Args:
            attr_breakdown: 속성 이름 → 합산값

        Returns:
            기본 전투력
        """
        power = 0.0
        for attr_name, value in attr_breakdown.items():
            power += attribute_power(attr_name, value)

        power += get_combat_power_for_total_attr(len(attr_breakdown))
        return power

    @staticmethod
    def priority_bonus(
        attr_breakdown: Mapping[str, int],
        preferences: OptimizationPreferences,
    ) -> float:
        """
        우선 속성 보너스

        - 속성이 없으면 0
        - 목표 레벨 달성: LEVEL_WEIGHTS[목표] * 100
        - 미달: LEVEL_WEIGHTS[달성] * 50
        - 목표를 허용치 이상 초과: 초과 레벨당 -20
        - 목표 없음: LEVEL_WEIGHTS[달성] * 50
        """
        bonus = 0.0
        tolerance = OPTIMIZER.PRIORITY_LEVEL_TOLERANCE

        for attr_name in preferences.priority_attributes:
            if attr_name not in attr_breakdown:
                continue

            level = calculate_attribute_level(attr_breakdown[attr_name])
            desired = preferences.desired_levels.get(attr_name, 0)

            if desired > 0:
                if level >= desired:
                    bonus += LEVEL_WEIGHTS[desired] * 100.0
                else:
                    bonus += LEVEL_WEIGHTS.get(level, 0.0) * 50.0

                if level > desired + tolerance:
                    bonus -= (level - desired) * 20.0
            else:
                bonus += LEVEL_WEIGHTS.get(level, 0.0) * 50.0

        return bonus

    @staticmethod
    def score(
        attr_breakdown: Mapping[str, int],
        preferences: Optional[OptimizationPreferences] = None,
    ) -> float:
        """조합 점수 = 기본 전투력 + 우선 속성 보너스"""
        score = PowerCalculator.combat_power(attr_breakdown)
        if preferences is not None and preferences.has_priority:
            score += PowerCalculator.priority_bonus(attr_breakdown, preferences)
        return score

    @staticmethod
    def priority_level(
        attr_breakdown: Mapping[str, int],
        priority_attributes: Sequence[str],
        desired_levels: Optional[Mapping[str, int]] = None,
    ) -> int:
        """
        우선 속성 최소 달성 레벨

        Returns:
            우선 속성 중 하나라도 없거나 목표 미달이면 0,
            아니면 우선 속성 레벨의 최솟값 (최대 6)
        """
        if not priority_attributes:
            return 0

        desired_levels = desired_levels or {}
        min_level = MAX_ATTR_LEVEL
        for attr_name in priority_attributes:
            if attr_name not in attr_breakdown:
                return 0

            level = calculate_attribute_level(attr_breakdown[attr_name])
            desired = desired_levels.get(attr_name)
            if desired is not None and level < desired:
                return 0

            min_level = min(min_level, level)

        return min_level
