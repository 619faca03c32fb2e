"""
Market Errors — таксономия ошибок движка

Каждая ошибка синхронна, указывает ровно одну причину и оставляет состояние
рынка таким, каким оно было до вызова. Категории:

- ConstructionError: рынок не создаётся (неверное число исходов, неверное
  начальное обеспечение)
- RequestValidationError: отклоняется один запрос, вызывающий должен
  исправить вход (неверный исход, нулевая дельта, нехватка долей/оплаты)
- AuthorizationError: вызывающий не имеет права на операцию
- LifecycleError: операция недопустима в текущей фазе рынка
- SnapshotIntegrityError: восстановленный снапшот нарушает инварианты

Арифметические ошибки области определения (ln от неположительного)
описаны в ls_lmsr.core.math.fixed_point.FixedPointDomainError.
"""


class MarketError(Exception):
    """
    Базовая ошибка рынка.

    Атрибут code — стабильное имя причины (совпадает с именем класса),
    пригодное для логов и внешних клиентов.
    """

    code: str = "MarketError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)


# =============================================================================
# КАТЕГОРИИ
# =============================================================================


class ConstructionError(MarketError):
    """Ошибка создания рынка (фатальна, рынок не создаётся)"""

    code = "ConstructionError"


class RequestValidationError(MarketError):
    """Ошибка валидации отдельного запроса"""

    code = "RequestValidationError"


class AuthorizationError(MarketError):
    """Ошибка авторизации"""

    code = "AuthorizationError"


class LifecycleError(MarketError):
    """Операция недопустима в текущей фазе рынка"""

    code = "LifecycleError"


# =============================================================================
# КОНКРЕТНЫЕ ОШИБКИ
# =============================================================================


class InvalidNumOutcomes(ConstructionError):
    code = "InvalidNumOutcomes"


class InvalidInitialFunding(ConstructionError):
    code = "InvalidInitialFunding"


class InvalidOutcome(RequestValidationError):
    code = "InvalidOutcome"


class InvalidDelta(RequestValidationError):
    code = "InvalidDelta"


class InsufficientShares(RequestValidationError):
    code = "InsufficientShares"


class InsufficientPayment(RequestValidationError):
    code = "InsufficientPayment"


class OnlyOwner(AuthorizationError):
    code = "OnlyOwner"


class MarketAlreadyResolved(LifecycleError):
    code = "MarketAlreadyResolved"


class NotResolved(LifecycleError):
    code = "NotResolved"


class SnapshotIntegrityError(MarketError):
    """
    Снапшот прошёл JSON Schema, но нарушает инварианты движка
    (длины векторов, collateral != C(q), отрицательные балансы).
    """

    code = "SnapshotIntegrityError"
