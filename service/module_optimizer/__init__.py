from service.module_optimizer.cache import OptimizationCache, generate_request_hash, optimization_cache
from service.module_optimizer.calculator import OptimizationPreferences, PowerCalculator
from service.module_optimizer.history_service import HistoryService
from service.module_optimizer.import_service import ImportResult, ModuleImportService
from service.module_optimizer.module_service import ModuleService
from service.module_optimizer.optimize_service import OptimizeService
from service.module_optimizer.optimizer import CandidatePart, ModuleCandidate, ModuleOptimizer, Solution

__all__ = [
    "OptimizationCache", "generate_request_hash", "optimization_cache",
    "OptimizationPreferences", "PowerCalculator",
    "HistoryService",
    "ImportResult", "ModuleImportService",
    "ModuleService",
    "OptimizeService",
    "CandidatePart", "ModuleCandidate", "ModuleOptimizer", "Solution",
]
