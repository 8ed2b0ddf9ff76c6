"""
모듈 조합 최적화 (하이브리드 greedy + local search)

    1. 사전 필터: 주 속성별 상위 MAX_MODULES_PER_ATTRIBUTE개만 남김
    2. greedy: 각 모듈을 시드로 점수가 가장 오르는 모듈을 3개 추가
    3. local search: 자리 하나를 교체해 더 나은 조합이면 채택 (first improvement)
    4. 중복 제거: 모듈 ID 집합 기준
    5. 정렬 후 max_solutions개로 자름

CPU 전용이며 요청 간 공유 상태가 없습니다.
"""
import logging
import time
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from config.module_optimizer import OPTIMIZER, OptimizerConfig, PartType, SortMode
from exceptions import InsufficientModulesError
from service.module_optimizer.calculator import OptimizationPreferences, PowerCalculator

logger = logging.getLogger(__name__)

# (priority_level, score)
Rating = Tuple[int, float]


@dataclass(frozen=True)
class CandidatePart:
    part_id: int
    name: str
    value: int
    type: PartType
    id: Optional[int] = None


@dataclass(frozen=True)
class ModuleCandidate:
    """최적화 입력 모듈"""

    id: int
    uuid: str
    name: str
    quality: int
    category: str
    parts: Tuple[CandidatePart, ...] = ()

    @cached_property
    def attr_values(self) -> Tuple[Tuple[str, int], ...]:
        """(속성 이름, 값) 목록"""
        return tuple((p.name, p.value) for p in self.parts)

    @property
    def total_attr_value(self) -> int:
        return sum(p.value for p in self.parts)

    @property
    def dominant_attribute(self) -> Optional[str]:
        """값이 가장 큰 속성 (동률이면 먼저 나온 것)"""
        best_name, best_value = None, 0
        for part in self.parts:
            if part.value > best_value:
                best_name, best_value = part.name, part.value
        return best_name

    def has_any_attribute(self, names) -> bool:
        return any(p.name in names for p in self.parts)

    @classmethod
    def from_model(cls, module) -> "ModuleCandidate":
        """parts가 로드된 Module에서 생성"""
        return cls(
            id=module.id,
            uuid=module.uuid,
            name=module.name,
            quality=module.quality,
            category=getattr(module.category, "value", module.category),
            parts=tuple(
                CandidatePart(
                    part_id=p.part_id,
                    name=p.name,
                    value=p.value,
                    type=PartType(p.type),
                    id=p.id,
                )
                for p in module.parts
            ),
        )


@dataclass
class Solution:
    """모듈 4개 조합과 평가 결과"""

    modules: List[ModuleCandidate]
    score: float
    priority_level: int
    total_attr_value: int
    attr_breakdown: Dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> Tuple[int, ...]:
        return tuple(sorted(m.id for m in self.modules))


class ModuleOptimizer:
    """
    모듈 조합 최적화기

    Args:
        config: 알고리즘 상수
    """

    def __init__(self, config: OptimizerConfig = OPTIMIZER):
        self.config = config

    def optimize(
        self,
        modules: Sequence[ModuleCandidate],
        category: str,
        preferences: Optional[OptimizationPreferences] = None,
        max_solutions: int = OPTIMIZER.DEFAULT_MAX_SOLUTIONS,
        sort_mode: SortMode = SortMode.BY_SCORE,
    ) -> List[Solution]:
        """
        최적 조합 탐색

        Args:
            modules: 같은 카테고리의 후보 모듈
            category: 카테고리 (오류 메시지용)
            preferences: 선호 설정
            max_solutions: 최대 결과 수
            sort_mode: 정렬 기준

        Returns:
            정렬된 Solution 목록

        Raises:
            InsufficientModulesError: 모듈이 4개 미만
        """
        required = self.config.MODULES_PER_COMBINATION
        if len(modules) < required:
            raise InsufficientModulesError(category, required, len(modules))

        preferences = preferences or OptimizationPreferences()
        max_solutions = min(max_solutions, self.config.MAX_SOLUTIONS)
        started = time.perf_counter()

        filtered = self.prefilter(modules)
        logger.info(f"[Optimizer] 사전 필터: {len(modules)} → {len(filtered)}개 (category={category})")

        ratings: Dict[FrozenSet[int], Rating] = {}
        seeds = self.greedy_construction(filtered, preferences, max_solutions * 2, ratings)
        improved = [self.local_search(s, filtered, preferences, ratings) for s in seeds]
        unique = self.deduplicate(improved)
        ranked = self.sort_solutions(unique, sort_mode)[:max_solutions]

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            f"[Optimizer] 완료: 시드 {len(seeds)}개, 고유 {len(unique)}개, "
            f"반환 {len(ranked)}개 ({elapsed_ms}ms)"
        )
        return ranked

    def prefilter(self, modules: Sequence[ModuleCandidate]) -> List[ModuleCandidate]:
        """주 속성별 (품질, 속성합) 내림차순 상위 N개, 원래 순서 유지"""
        groups: Dict[str, List[ModuleCandidate]] = {}
        for module in modules:
            dominant = module.dominant_attribute
            if dominant is not None:
                groups.setdefault(dominant, []).append(module)

        keep = set()
        for group in groups.values():
            ranked = sorted(group, key=lambda m: (-m.quality, -m.total_attr_value))
            keep.update(m.id for m in ranked[:self.config.MAX_MODULES_PER_ATTRIBUTE])

        return [m for m in modules if m.id in keep]

    @staticmethod
    def attr_breakdown(modules: Sequence[ModuleCandidate]) -> Dict[str, int]:
        """속성 이름 → 합산값"""
        breakdown: Dict[str, int] = {}
        for module in modules:
            for name, value in module.attr_values:
                breakdown[name] = breakdown.get(name, 0) + value
        return breakdown

    @staticmethod
    def _with_module(base: Dict[str, int], module: ModuleCandidate) -> Dict[str, int]:
        breakdown = dict(base)
        for name, value in module.attr_values:
            breakdown[name] = breakdown.get(name, 0) + value
        return breakdown

    @staticmethod
    def _rate(breakdown: Dict[str, int], preferences: OptimizationPreferences) -> Rating:
        priority_level = 0
        if preferences.has_priority:
            priority_level = PowerCalculator.priority_level(
                breakdown, preferences.priority_attributes, preferences.desired_levels
            )
        return priority_level, PowerCalculator.score(breakdown, preferences)

    def _rate_with(
        self,
        base: Dict[str, int],
        base_ids: Sequence[int],
        candidate: ModuleCandidate,
        preferences: OptimizationPreferences,
        ratings: Dict[FrozenSet[int], Rating],
    ) -> Rating:
        """base 조합에 candidate를 더한 평가 (모듈 집합 기준 메모)"""
        key = frozenset((*base_ids, candidate.id))
        rating = ratings.get(key)
        if rating is None:
            rating = self._rate(self._with_module(base, candidate), preferences)
            ratings[key] = rating
        return rating

    def evaluate(
        self,
        modules: Sequence[ModuleCandidate],
        preferences: OptimizationPreferences,
    ) -> Solution:
        breakdown = self.attr_breakdown(modules)
        priority_level, score = self._rate(breakdown, preferences)
        return Solution(
            modules=list(modules),
            score=score,
            priority_level=priority_level,
            total_attr_value=sum(breakdown.values()),
            attr_breakdown=breakdown,
        )

    def greedy_construction(
        self,
        modules: Sequence[ModuleCandidate],
        preferences: OptimizationPreferences,
        target_count: int,
        ratings: Optional[Dict[FrozenSet[int], Rating]] = None,
    ) -> List[Solution]:
        ratings = {} if ratings is None else ratings
        solutions = []
        size = self.config.MODULES_PER_COMBINATION

        for seed in modules:
            if len(solutions) >= target_count:
                break

            selected = [seed]
            remaining = [m for m in modules if m.id != seed.id]
            while len(selected) < size and remaining:
                best = self._select_best(selected, remaining, preferences, ratings)
                selected.append(best)
                remaining = [m for m in remaining if m.id != best.id]

            if len(selected) == size:
                solutions.append(self.evaluate(selected, preferences))

        return solutions

    def _select_best(
        self,
        selected: List[ModuleCandidate],
        remaining: List[ModuleCandidate],
        preferences: OptimizationPreferences,
        ratings: Dict[FrozenSet[int], Rating],
    ) -> ModuleCandidate:
        base = self.attr_breakdown(selected)
        base_ids = [m.id for m in selected]

        best, best_score = None, float("-inf")
        for candidate in remaining:
            _, score = self._rate_with(base, base_ids, candidate, preferences, ratings)
            if score > best_score:
                best, best_score = candidate, score
        return best

    def local_search(
        self,
        solution: Solution,
        modules: Sequence[ModuleCandidate],
        preferences: OptimizationPreferences,
        ratings: Optional[Dict[FrozenSet[int], Rating]] = None,
    ) -> Solution:
        ratings = {} if ratings is None else ratings
        current = solution
        for _ in range(self.config.MAX_ITERATIONS):
            swapped = self._first_improvement(current, modules, preferences, ratings)
            if swapped is None:
                break
            current = self.evaluate(swapped, preferences)
        return current

    def _first_improvement(
        self,
        current: Solution,
        modules: Sequence[ModuleCandidate],
        preferences: OptimizationPreferences,
        ratings: Dict[FrozenSet[int], Rating],
    ) -> Optional[List[ModuleCandidate]]:
        """자리 하나를 바꿔 처음으로 나아지는 조합 (없으면 None)"""
        member_ids = {m.id for m in current.modules}
        current_rating = (current.priority_level, current.score)

        for position in range(len(current.modules)):
            others = current.modules[:position] + current.modules[position + 1:]
            # 나가는 모듈을 뺀 합산값에 들어오는 모듈만 더함
            base = self.attr_breakdown(others)
            base_ids = [m.id for m in others]

            for candidate in modules:
                if candidate.id in member_ids:
                    continue
                rating = self._rate_with(base, base_ids, candidate, preferences, ratings)
                if self._improves(rating, current_rating, preferences):
                    swapped = list(current.modules)
                    swapped[position] = candidate
                    return swapped
        return None

    @staticmethod
    def _improves(a: Rating, b: Rating, preferences: OptimizationPreferences) -> bool:
        if preferences.has_priority and a[0] != b[0]:
            return a[0] > b[0]
        return a[1] > b[1]

    @staticmethod
    def is_better(a: Solution, b: Solution, preferences: OptimizationPreferences) -> bool:
        """우선 속성이 있으면 priority_level 먼저, 그다음 score"""
        return ModuleOptimizer._improves(
            (a.priority_level, a.score), (b.priority_level, b.score), preferences
        )

    @staticmethod
    def deduplicate(solutions: Sequence[Solution]) -> List[Solution]:
        seen = set()
        unique = []
        for solution in solutions:
            if solution.key in seen:
                continue
            seen.add(solution.key)
            unique.append(solution)
        return unique

    @staticmethod
    def sort_solutions(solutions: Sequence[Solution], sort_mode: SortMode) -> List[Solution]:
        if sort_mode == SortMode.BY_TOTAL_ATTR:
            return sorted(solutions, key=lambda s: (-s.total_attr_value, -s.score, -s.priority_level))
        return sorted(solutions, key=lambda s: (-s.score, -s.priority_level))
