"""
서버 설정 상수

모든 매직 넘버와 점수표를 여기서 관리합니다.
각 도메인별 설정은 config/ 하위 모듈에 정의되어 있습니다.
"""
from config.dedup import DedupConfig, DEDUP, UploadConfig, UPLOAD
from config.module_optimizer import (
    ModuleCategory, PartType, SortMode,
    MODULE_NAMES, MODULE_CATEGORY_BY_CONFIG, ATTR_NAMES, ATTR_TYPE_BY_NAME,
    ATTR_THRESHOLDS, MAX_ATTR_LEVEL,
    BASIC_ATTR_POWER, SPECIAL_ATTR_POWER, TOTAL_ATTR_POWER, LEVEL_WEIGHTS,
    OptimizerConfig, OPTIMIZER,
    OptimizationCacheConfig, OPTIMIZATION_CACHE,
    calculate_attribute_level, get_combat_power_for_level,
    get_combat_power_for_total_attr, get_attribute_type,
    get_module_name, get_module_category,
    is_valid_config_id, is_valid_part_id,
    validate_scoring_tables,
)

__all__ = [
    # dedup
    "DedupConfig", "DEDUP",
    "UploadConfig", "UPLOAD",
    # enums
    "ModuleCategory", "PartType", "SortMode",
    # mappings
    "MODULE_NAMES", "MODULE_CATEGORY_BY_CONFIG", "ATTR_NAMES", "ATTR_TYPE_BY_NAME",
    # scoring tables
    "ATTR_THRESHOLDS", "MAX_ATTR_LEVEL",
    "BASIC_ATTR_POWER", "SPECIAL_ATTR_POWER", "TOTAL_ATTR_POWER", "LEVEL_WEIGHTS",
    # optimizer
    "OptimizerConfig", "OPTIMIZER",
    "OptimizationCacheConfig", "OPTIMIZATION_CACHE",
    # lookups
    "calculate_attribute_level", "get_combat_power_for_level",
    "get_combat_power_for_total_attr", "get_attribute_type",
    "get_module_name", "get_module_category",
    "is_valid_config_id", "is_valid_part_id",
    "validate_scoring_tables",
]
