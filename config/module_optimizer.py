"""
모듈 최적화 설정

모듈/속성 매핑 테이블과 전투력 점수표, 최적화 알고리즘 상수를 정의합니다.
모든 테이블은 불변이며 import 시점에 레벨 구성이 검증됩니다.
"""
from dataclasses import dataclass
from enum import Enum


class ModuleCategory(str, Enum):
    """모듈 카테고리"""
    ATTACK = "ATTACK"
    DEFENSE = "DEFENSE"
    SUPPORT = "SUPPORT"


class PartType(str, Enum):
    """속성 타입"""
    BASIC = "basic"
    SPECIAL = "special"


class SortMode(str, Enum):
    """결과 정렬 기준"""
    BY_SCORE = "ByScore"
    BY_TOTAL_ATTR = "ByTotalAttr"


# =============================================================================
# 모듈 / 속성 매핑
# =============================================================================

MODULE_NAMES: dict[int, str] = {
    # 공격
    5500101: "Basic Attack",
    5500102: "High-Performance Attack",
    5500103: "Superior Attack",
    # 방어
    5500301: "Basic Defense",
    5500302: "High-Performance Defense",
    5500303: "Superior Defense",
    # 지원
    5500201: "Basic Support",
    5500202: "High-Performance Support",
    5500203: "Superior Support",
}

MODULE_CATEGORY_BY_CONFIG: dict[int, ModuleCategory] = {
    5500101: ModuleCategory.ATTACK,
    5500102: ModuleCategory.ATTACK,
    5500103: ModuleCategory.ATTACK,
    5500301: ModuleCategory.DEFENSE,
    5500302: ModuleCategory.DEFENSE,
    5500303: ModuleCategory.DEFENSE,
    5500201: ModuleCategory.SUPPORT,
    5500202: ModuleCategory.SUPPORT,
    5500203: ModuleCategory.SUPPORT,
}

ATTR_NAMES: dict[int, str] = {
    # 기본 속성
    1110: "Might",
    1111: "Agility",
    1112: "Intellect",
    1113: "Special Attack",
    1114: "Elite Slayer",
    1205: "Special Healing",
    1206: "Healing Expertise",
    1307: "Magic Resistance",
    1308: "Physical Resistance",
    1407: "Casting Focus",
    1408: "Attack Speed Focus",
    1409: "Critical Focus",
    1410: "Luck Focus",
    # 특수 (EXTREME) 속성
    2104: "Extreme - Damage Stack",
    2105: "Extreme - Agility",
    2204: "Extreme - Lifeblood",
    2205: "Extreme - First Aid",
    2304: "Extreme - Desperate Guardian",
    2404: "Extreme - Life Fluctuation",
    2405: "Extreme - Life Siphon",
    2406: "Extreme - Team Crit/Luck",
}

# 특수 속성 ID는 2xxx 대역
ATTR_TYPE_BY_NAME: dict[str, PartType] = {
    name: (PartType.SPECIAL if attr_id >= 2000 else PartType.BASIC)
    for attr_id, name in ATTR_NAMES.items()
}


# =============================================================================
# 전투력 점수표
# =============================================================================

ATTR_THRESHOLDS: tuple[int, ...] = (1, 4, 8, 12, 16, 20)
"""속성 레벨 임계값 (합산값이 임계값 이상이면 해당 레벨 달성)"""

MAX_ATTR_LEVEL = 6

BASIC_ATTR_POWER: dict[int, int] = {
    1: 7,
    2: 14,
    3: 29,
    4: 44,
    5: 167,
    6: 254,
}
"""기본 속성 레벨별 전투력"""

SPECIAL_ATTR_POWER: dict[int, int] = {
    1: 14,
    2: 29,
    3: 59,
    4: 89,
    5: 298,
    6: 448,
}
"""특수 속성 레벨별 전투력"""

TOTAL_ATTR_POWER: dict[int, int] = {
    0: 0, 1: 5, 2: 11, 3: 17, 4: 23, 5: 29, 6: 34, 7: 40, 8: 46,
    18: 104, 19: 110, 20: 116, 21: 122, 22: 128, 23: 133, 24: 139,
    25: 145, 26: 151, 27: 157, 28: 163, 29: 168, 30: 174, 31: 180,
    32: 186, 33: 192, 34: 198, 35: 203, 36: 209, 37: 215, 38: 221,
    39: 227, 40: 233, 41: 238, 42: 244, 43: 250, 44: 256, 45: 262,
    46: 267, 47: 273, 48: 279, 49: 285, 50: 291, 51: 297, 52: 302,
    53: 308, 54: 314, 55: 320, 56: 326, 57: 332, 58: 337, 59: 343,
    60: 349, 61: 355, 62: 361, 63: 366, 64: 372, 65: 378, 66: 384,
    67: 390, 68: 396, 69: 401, 70: 407, 71: 413, 72: 419, 73: 425,
    74: 431, 75: 436, 76: 442, 77: 448, 78: 454, 79: 460, 80: 466,
    81: 471, 82: 477, 83: 483, 84: 489, 85: 495, 86: 500, 87: 506,
    88: 512, 89: 518, 90: 524, 91: 530, 92: 535, 93: 541, 94: 547,
    95: 553, 96: 559, 97: 565, 98: 570, 99: 576, 100: 582, 101: 588,
    102: 594, 103: 599, 104: 605, 105: 611, 106: 617,
    113: 658, 114: 664, 115: 669, 116: 675, 117: 681, 118: 687,
    119: 693, 120: 699,
}
"""속성 종류 수별 보너스 전투력 (정의되지 않은 값은 최대값 사용)"""

TOTAL_ATTR_POWER_FALLBACK: int = max(TOTAL_ATTR_POWER.values())

LEVEL_WEIGHTS: dict[int, float] = {
    1: 1.0,
    2: 4.0,
    3: 8.0,
    4: 12.0,
    5: 16.0,
    6: 20.0,
}
"""우선 속성 보너스 계산용 레벨 가중치"""


# =============================================================================
# 최적화 알고리즘 상수
# =============================================================================

@dataclass(frozen=True)
class OptimizerConfig:
    """최적화 알고리즘 설정"""

    MAX_MODULES_PER_ATTRIBUTE: int = 30
    """사전 필터링 시 주 속성별 유지할 최대 모듈 수"""

    MAX_ITERATIONS: int = 30
    """지역 탐색 최대 반복 횟수"""

    MODULES_PER_COMBINATION: int = 4
    """조합당 모듈 수 (고정)"""

    MAX_SOLUTIONS: int = 60
    """반환 가능한 최대 조합 수"""

    DEFAULT_MAX_SOLUTIONS: int = 10
    """요청에 값이 없을 때 반환할 조합 수"""

    PRIORITY_LEVEL_TOLERANCE: int = 0
    """목표 레벨 초과 허용치 (0 = 초과 시 바로 감점)"""

    ALGORITHM_NAME: str = "hybrid-greedy-local-search"
    """응답 메타데이터에 표시되는 알고리즘 이름"""


OPTIMIZER = OptimizerConfig()


@dataclass(frozen=True)
class OptimizationCacheConfig:
    """최적화 결과 캐시 설정"""

    TTL_HOURS: int = 1
    """캐시 유효 시간"""

    PRUNE_INTERVAL_MINUTES: int = 30
    """만료 캐시 정리 주기"""

    REQUEST_HASH_BYTES: int = 16
    """요청 해시 길이 (SHA-256 앞 16바이트 = 32 hex)"""

    HISTORY_DEFAULT_LIMIT: int = 20
    """기록 목록 기본 개수"""

    HISTORY_MAX_LIMIT: int = 100
    """기록 목록 최대 개수 (범위 밖이면 기본값)"""


OPTIMIZATION_CACHE = OptimizationCacheConfig()


# =============================================================================
# 조회 함수
# =============================================================================

def calculate_attribute_level(value: int) -> int:
    """합산 속성값 → 레벨 (임계값 이하 개수, 최대 6)"""
    level = 0
    for threshold in ATTR_THRESHOLDS:
        if value < threshold:
            break
        level += 1
    return min(level, MAX_ATTR_LEVEL)


def get_combat_power_for_level(level: int, attr_type: PartType) -> int:
    """레벨별 전투력 (범위 밖이면 0)"""
    if level < 1 or level > MAX_ATTR_LEVEL:
        return 0
    if attr_type == PartType.SPECIAL:
        return SPECIAL_ATTR_POWER[level]
    return BASIC_ATTR_POWER[level]


def get_combat_power_for_total_attr(attr_count: int) -> int:
    """속성 종류 수별 보너스"""
    return TOTAL_ATTR_POWER.get(attr_count, TOTAL_ATTR_POWER_FALLBACK)


def get_attribute_type(attr_name: str) -> PartType:
    """속성 이름 → 타입 (모르는 속성은 basic)"""
    return ATTR_TYPE_BY_NAME.get(attr_name, PartType.BASIC)


def get_module_name(config_id: int) -> str:
    return MODULE_NAMES.get(config_id, "Unknown Module")


def get_module_category(config_id: int) -> ModuleCategory:
    return MODULE_CATEGORY_BY_CONFIG.get(config_id, ModuleCategory.ATTACK)


def is_valid_config_id(config_id: int) -> bool:
    return config_id in MODULE_NAMES


def is_valid_part_id(part_id: int) -> bool:
    return part_id in ATTR_NAMES


def validate_scoring_tables() -> None:
    """
    점수표 구성 검증

    Raises:
        RuntimeError: 6개 레벨이 모두 정의되지 않은 테이블이 있을 때
    """
    levels = set(range(1, MAX_ATTR_LEVEL + 1))
    if len(ATTR_THRESHOLDS) != MAX_ATTR_LEVEL:
        raise RuntimeError("ATTR_THRESHOLDS must have exactly 6 values")
    for name, table in (
        ("BASIC_ATTR_POWER", BASIC_ATTR_POWER),
        ("SPECIAL_ATTR_POWER", SPECIAL_ATTR_POWER),
        ("LEVEL_WEIGHTS", LEVEL_WEIGHTS),
    ):
        if set(table) != levels:
            raise RuntimeError(f"{name} must define levels 1..6")
    if OPTIMIZER.MODULES_PER_COMBINATION != 4:
        raise RuntimeError("MODULES_PER_COMBINATION must be 4")


validate_scoring_tables()
