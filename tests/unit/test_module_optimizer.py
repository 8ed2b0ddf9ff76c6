"""
ModuleOptimizer 유닛 테스트

사전 필터, greedy/local search 결과 유효성, 중복 제거, 정렬을 테스트합니다.
"""
import random
import time

import pytest

from config.module_optimizer import OptimizerConfig, SortMode
from exceptions import InsufficientModulesError
from service.module_optimizer.calculator import OptimizationPreferences, PowerCalculator
from service.module_optimizer.optimizer import ModuleOptimizer, Solution
from tests.fixtures.modules import make_candidate

ATTR_POOL = [
    "Might", "Agility", "Intellect", "Special Attack", "Elite Slayer",
    "Critical Focus", "Luck Focus", "Attack Speed Focus",
]

WIDE_ATTR_POOL = ATTR_POOL + ["Casting Focus", "Special Healing", "Healing Expertise"]


def build_inventory(count: int):
    """속성 조합이 조금씩 다른 모듈 목록"""
    modules = []
    for i in range(count):
        first = ATTR_POOL[i % len(ATTR_POOL)]
        second = ATTR_POOL[(i * 3 + 1) % len(ATTR_POOL)]
        parts = [(first, 3 + i % 7)]
        if second != first:
            parts.append((second, 1 + (i * 5) % 6))
        modules.append(make_candidate(i + 1, parts, quality=1 + i % 5))
    return modules


def build_random_inventory(count: int, seed: int = 7):
    """속성 11종, 모듈당 1~3개 속성의 무작위 목록"""
    rng = random.Random(seed)
    modules = []
    for i in range(count):
        names = rng.sample(WIDE_ATTR_POOL, rng.randint(1, 3))
        parts = [(name, rng.randint(1, 10)) for name in names]
        modules.append(make_candidate(i + 1, parts, quality=rng.randint(1, 5)))
    return modules


class TestOptimizeBasics:
    """기본 동작 테스트"""

    def test_exactly_four_modules(self):
        """모듈 4개면 그 4개로 된 조합 하나"""
        modules = [
            make_candidate(1, [("Might", 5), ("Agility", 3)]),
            make_candidate(2, [("Might", 4)]),
            make_candidate(3, [("Agility", 6), ("Luck Focus", 2)]),
            make_candidate(4, [("Critical Focus", 7)]),
        ]
        solutions = ModuleOptimizer().optimize(modules, "ATTACK")

        assert len(solutions) == 1
        solution = solutions[0]
        assert solution.key == (1, 2, 3, 4)
        assert solution.attr_breakdown == {"Might": 9, "Agility": 9, "Luck Focus": 2, "Critical Focus": 7}
        assert solution.total_attr_value == 27
        assert solution.score == PowerCalculator.score(solution.attr_breakdown)

    def test_insufficient_modules(self):
        modules = [make_candidate(i, [("Might", 5)]) for i in range(1, 4)]
        with pytest.raises(InsufficientModulesError) as exc_info:
            ModuleOptimizer().optimize(modules, "ATTACK")
        assert exc_info.value.shortfall == 1

    def test_solutions_valid(self):
        """모든 조합은 서로 다른 4개 모듈"""
        modules = build_inventory(24)
        ids = {m.id for m in modules}
        solutions = ModuleOptimizer().optimize(modules, "ATTACK", max_solutions=10)

        assert 0 < len(solutions) <= 10
        for solution in solutions:
            member_ids = [m.id for m in solution.modules]
            assert len(member_ids) == 4
            assert len(set(member_ids)) == 4
            assert set(member_ids) <= ids

    def test_no_duplicate_solutions(self):
        solutions = ModuleOptimizer().optimize(build_inventory(16), "ATTACK", max_solutions=20)
        keys = [s.key for s in solutions]
        assert len(keys) == len(set(keys))

    def test_sorted_by_score(self):
        solutions = ModuleOptimizer().optimize(build_inventory(20), "ATTACK", max_solutions=15)
        scores = [s.score for s in solutions]
        assert scores == sorted(scores, reverse=True)

    def test_sorted_by_total_attr(self):
        solutions = ModuleOptimizer().optimize(
            build_inventory(20), "ATTACK", max_solutions=15, sort_mode=SortMode.BY_TOTAL_ATTR
        )
        keys = [(s.total_attr_value, s.score) for s in solutions]
        assert keys == sorted(keys, reverse=True)

    def test_deterministic(self):
        modules = build_inventory(20)
        prefs = OptimizationPreferences(priority_attributes=("Might",))
        first = ModuleOptimizer().optimize(modules, "ATTACK", prefs, max_solutions=8)
        second = ModuleOptimizer().optimize(modules, "ATTACK", prefs, max_solutions=8)
        assert [s.key for s in first] == [s.key for s in second]
        assert [s.score for s in first] == [s.score for s in second]

    def test_max_solutions_capped(self):
        """설정 최대값을 넘으면 잘림"""
        optimizer = ModuleOptimizer(OptimizerConfig(MAX_SOLUTIONS=3))
        solutions = optimizer.optimize(build_inventory(20), "ATTACK", max_solutions=50)
        assert len(solutions) <= 3


class TestPrefilter:
    """사전 필터 테스트"""

    def test_keeps_top_per_dominant_attribute(self):
        optimizer = ModuleOptimizer(OptimizerConfig(MAX_MODULES_PER_ATTRIBUTE=2))
        modules = [
            make_candidate(1, [("Might", 5)], quality=1),
            make_candidate(2, [("Might", 5)], quality=5),
            make_candidate(3, [("Might", 9)], quality=3),
            make_candidate(4, [("Agility", 2)], quality=1),
            make_candidate(5, [("Might", 6)], quality=5),
        ]

        filtered = optimizer.prefilter(modules)

        # Might 그룹: 품질 5(5, 2) 남음, 원래 순서 유지
        assert [m.id for m in filtered] == [2, 4, 5]

    def test_dominant_attribute_tie_uses_first_part(self):
        module = make_candidate(1, [("Agility", 4), ("Might", 4)])
        assert module.dominant_attribute == "Agility"


class TestComparison:
    """조합 비교/정렬 테스트"""

    def _solution(self, key, score, priority_level, total=10):
        modules = [make_candidate(i, [("Might", 1)]) for i in key]
        return Solution(modules, score, priority_level, total, {"Might": 4})

    def test_priority_level_first(self):
        prefs = OptimizationPreferences(priority_attributes=("Might",))
        high = self._solution((1, 2, 3, 4), score=100, priority_level=3)
        low = self._solution((1, 2, 3, 5), score=500, priority_level=2)
        assert ModuleOptimizer.is_better(high, low, prefs) is True
        assert ModuleOptimizer.is_better(low, high, prefs) is False

    def test_score_only_without_priority(self):
        prefs = OptimizationPreferences()
        high = self._solution((1, 2, 3, 4), score=100, priority_level=3)
        low = self._solution((1, 2, 3, 5), score=500, priority_level=2)
        assert ModuleOptimizer.is_better(low, high, prefs) is True

    def test_tied_score_ranks_higher_priority_first(self):
        a = self._solution((1, 2, 3, 4), score=300, priority_level=1)
        b = self._solution((1, 2, 3, 5), score=300, priority_level=4)
        ranked = ModuleOptimizer.sort_solutions([a, b], SortMode.BY_SCORE)
        assert ranked[0] is b

    def test_deduplicate_keeps_first(self):
        a = self._solution((4, 3, 2, 1), score=100, priority_level=0)
        b = self._solution((1, 2, 3, 4), score=200, priority_level=0)
        unique = ModuleOptimizer.deduplicate([a, b])
        assert unique == [a]

    def test_priority_preference_reaches_desired_level(self):
        """목표 레벨을 달성할 수 있으면 1위 조합은 달성"""
        modules = build_inventory(12) + [
            make_candidate(100 + i, [("Luck Focus", 4)], quality=1) for i in range(4)
        ]
        prefs = OptimizationPreferences(priority_attributes=("Luck Focus",), desired_levels={"Luck Focus": 5})
        best = ModuleOptimizer().optimize(modules, "ATTACK", prefs, max_solutions=5)[0]
        assert best.priority_level >= 5


class TestSearchScale:
    """대규모 인벤토리 탐색"""

    def test_scores_match_full_evaluation(self):
        """탐색 중 평가와 최종 조합 재평가가 같음"""
        prefs = OptimizationPreferences(
            priority_attributes=("Might", "Critical Focus"),
            desired_levels={"Might": 3},
        )
        solutions = ModuleOptimizer().optimize(build_random_inventory(60), "ATTACK", prefs, max_solutions=20)

        assert solutions
        for solution in solutions:
            assert len(set(solution.key)) == 4
            assert solution.attr_breakdown == ModuleOptimizer.attr_breakdown(solution.modules)
            assert solution.score == PowerCalculator.score(solution.attr_breakdown, prefs)

    @pytest.mark.slow
    def test_two_hundred_modules_within_two_seconds(self):
        modules = build_random_inventory(200)
        prefs = OptimizationPreferences(priority_attributes=("Might", "Critical Focus"))

        started = time.perf_counter()
        solutions = ModuleOptimizer().optimize(modules, "ATTACK", prefs, max_solutions=60)
        elapsed = time.perf_counter() - started

        assert solutions
        assert elapsed <= 2.0
