"""
밸류에이션 엔진 예외 정의

모든 예외는 잘못된 입력에 대한 로컬 검증 실패이며 재시도 대상이 아닙니다.
ValueError를 상속하므로 기존 ValueError 처리 코드와 호환됩니다.
"""


class ValuationError(ValueError):
    """밸류에이션 엔진 오류의 베이스"""


class InvalidTick(ValuationError):
    """틱이 [MIN_TICK, MAX_TICK] 범위를 벗어남"""


class InvalidSqrtRatio(ValuationError):
    """sqrtPriceX96이 [MIN_SQRT_RATIO, MAX_SQRT_RATIO) 범위를 벗어남"""


class InvalidPrice(ValuationError):
    """가격이 0 이하"""


class InvalidRange(ValuationError):
    """tick_lower >= tick_upper 또는 틱 간격 불일치"""


class InvalidLiquidity(ValuationError):
    """유동성이 음수"""


class Overflow(ValuationError):
    """고정소수점 표현의 비트 폭을 초과하는 연산"""
