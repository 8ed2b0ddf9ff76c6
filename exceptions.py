"""
서버 커스텀 예외 클래스 정의

모든 예외는 EncounterHubError를 상속받아 일관된 에러 처리를 제공합니다.
사용자에게 보이는 메시지에는 해시, SQL, 내부 식별자를 넣지 않습니다.
"""


class EncounterHubError(Exception):
    """기본 예외 클래스"""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str = "알 수 없는 오류가 발생했습니다"):
        self.message = message
        super().__init__(self.message)


# =============================================================================
# 요청 검증 예외 (400)
# =============================================================================


class ValidationFailureError(EncounterHubError):
    """잘못된 요청"""

    status_code = 400
    code = "validation_error"

    def __init__(self, reason: str = "요청 형식이 올바르지 않습니다"):
        self.reason = reason
        super().__init__(reason)


class InvalidCategoryError(ValidationFailureError):
    """알 수 없는 모듈 카테고리"""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"지원하지 않는 카테고리입니다: {category}")


class InvalidSortModeError(ValidationFailureError):
    """알 수 없는 정렬 기준"""

    def __init__(self, sort_mode: str):
        self.sort_mode = sort_mode
        super().__init__(f"지원하지 않는 정렬 기준입니다: {sort_mode}")


class MaxSolutionsOutOfRangeError(ValidationFailureError):
    """조합 수 범위 초과"""

    def __init__(self, max_solutions: int, limit: int = 60):
        self.max_solutions = max_solutions
        self.limit = limit
        super().__init__(f"조합 수는 1~{limit} 사이여야 합니다. (요청: {max_solutions})")


class InvalidDesiredLevelError(ValidationFailureError):
    """목표 레벨 범위 초과"""

    def __init__(self, attr_name: str, level: int):
        self.attr_name = attr_name
        self.level = level
        super().__init__(f"'{attr_name}' 목표 레벨은 1~6 사이여야 합니다. (요청: {level})")


class ModuleHasNoPartsError(ValidationFailureError):
    """속성이 없는 모듈"""

    def __init__(self, module_name: str):
        self.module_name = module_name
        super().__init__(f"모듈 '{module_name}'에 속성이 없습니다.")


class InvalidModuleDataError(ValidationFailureError):
    """모듈 데이터 검증 실패"""

    def __init__(self, reason: str):
        super().__init__(f"모듈 데이터 오류: {reason}")


class EmptyUploadError(ValidationFailureError):
    """빈 업로드"""

    def __init__(self):
        super().__init__("업로드할 전투 기록이 없습니다.")


class UploadBatchTooLargeError(ValidationFailureError):
    """업로드 개수 초과"""

    def __init__(self, count: int, limit: int = 10):
        self.count = count
        self.limit = limit
        super().__init__(f"한 번에 최대 {limit}개까지 업로드할 수 있습니다. (요청: {count})")


class TooManyHashesError(ValidationFailureError):
    """중복 확인 해시 개수 초과"""

    def __init__(self, count: int, limit: int = 50):
        self.count = count
        self.limit = limit
        super().__init__(f"한 번에 최대 {limit}개까지 확인할 수 있습니다. (요청: {count})")


# =============================================================================
# 모듈 최적화 예외
# =============================================================================


class InsufficientModulesError(EncounterHubError):
    """조합에 필요한 모듈 부족"""

    status_code = 400
    code = "insufficient_modules"

    def __init__(self, category: str, required: int, current: int):
        self.category = category
        self.required = required
        self.current = current
        self.shortfall = required - current
        super().__init__(
            f"{category} 카테고리 모듈이 부족합니다. (필요: {required}, 보유: {current})"
        )


class UserModuleNotFoundError(EncounterHubError):
    """모듈을 찾을 수 없음"""

    status_code = 404
    code = "module_not_found"

    def __init__(self, module_id: int):
        self.module_id = module_id
        super().__init__("모듈을 찾을 수 없습니다.")


class OptimizationResultNotFoundError(EncounterHubError):
    """최적화 기록을 찾을 수 없음"""

    status_code = 404
    code = "history_not_found"

    def __init__(self, result_id: int):
        self.result_id = result_id
        super().__init__("최적화 기록을 찾을 수 없습니다.")


# =============================================================================
# 인증 예외
# =============================================================================


class InvalidApiKeyError(EncounterHubError):
    """API 키 인증 실패"""

    status_code = 401
    code = "unauthorized"

    def __init__(self):
        super().__init__("유효한 API 키가 필요합니다.")


# =============================================================================
# 저장소 예외 (500)
# =============================================================================


class StorageFailureError(EncounterHubError):
    """데이터베이스 트랜잭션/쿼리 실패"""

    status_code = 500
    code = "storage_error"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} 처리 중 저장소 오류가 발생했습니다.")
