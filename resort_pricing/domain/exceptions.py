"""Domain exceptions for Resort Pricing Service."""


class DomainException(Exception):
    """Base domain exception."""

    def __init__(
        self, message: str, code: str = "DOMAIN_ERROR", status_code: int = 400
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(self.message)


class RateServiceError(DomainException):
    """Base class for rate catalog validation and lookup errors."""


class InvalidNameException(RateServiceError):
    """Invalid name exception."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="INVALID_NAME")


class InvalidDescriptionException(RateServiceError):
    """Invalid description exception."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="INVALID_DESCRIPTION")


class InvalidRateTypeException(RateServiceError):
    """Unknown rate type exception."""

    def __init__(self, rate_type: str) -> None:
        super().__init__(
            message=f"Invalid rate type: {rate_type}",
            code="INVALID_RATE_TYPE",
        )


class InvalidBasePriceException(RateServiceError):
    """Negative base price exception."""

    def __init__(self) -> None:
        super().__init__(
            message="Base price cannot be negative",
            code="INVALID_BASE_PRICE",
        )


class InvalidCurrencyException(RateServiceError):
    """Unsupported currency exception."""

    def __init__(self, currency: str) -> None:
        super().__init__(
            message=f"Unsupported currency: {currency}",
            code="INVALID_CURRENCY",
        )


class InvalidItemTypeException(RateServiceError):
    """Missing applicable item type exception."""

    def __init__(self) -> None:
        super().__init__(
            message="Applicable item type is required",
            code="INVALID_ITEM_TYPE",
        )


class InvalidItemIdException(RateServiceError):
    """Malformed item identifier exception."""

    def __init__(self, item_id: str) -> None:
        super().__init__(
            message=f"Invalid applicable item ID: {item_id}",
            code="INVALID_ITEM_ID",
        )


class InvalidRateIdException(RateServiceError):
    """Malformed rate identifier exception."""

    def __init__(self, rate_id: str) -> None:
        super().__init__(
            message=f"Invalid rate ID: {rate_id}",
            code="INVALID_RATE_ID",
        )


class InvalidModifierIdException(RateServiceError):
    """Malformed modifier identifier exception."""

    def __init__(self, modifier_id: str) -> None:
        super().__init__(
            message=f"Invalid modifier ID: {modifier_id}",
            code="INVALID_MODIFIER_ID",
        )


class InvalidDateRangeException(RateServiceError):
    """Unparseable dates or start after end."""

    def __init__(self, message: str = "Start date must be before end date") -> None:
        super().__init__(message=message, code="INVALID_DATE_RANGE")


class InvalidDayOfWeekException(RateServiceError):
    """Unknown day of week exception."""

    def __init__(self, day: str) -> None:
        super().__init__(
            message=f"Invalid day of week: {day}",
            code="INVALID_DAY_OF_WEEK",
        )


class InvalidStayRangeException(RateServiceError):
    """Invalid min/max stay exception."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="INVALID_STAY_RANGE")


class InvalidModifierTypeException(RateServiceError):
    """Unknown modifier type exception."""

    def __init__(self, modifier_type: str) -> None:
        super().__init__(
            message=f"Invalid modifier type: {modifier_type}",
            code="INVALID_MODIFIER_TYPE",
        )


class InvalidModifierValueException(RateServiceError):
    """Percentage modifier out of bounds exception."""

    def __init__(self) -> None:
        super().__init__(
            message="Percentage must be between -100 and 1000",
            code="INVALID_MODIFIER_VALUE",
        )


class RateNotFoundException(RateServiceError):
    """Rate not found exception."""

    def __init__(self, rate_id: str) -> None:
        super().__init__(
            message=f"Rate with id {rate_id} not found",
            code="RATE_NOT_FOUND",
            status_code=404,
        )


class ModifierNotFoundException(RateServiceError):
    """Rate modifier not found exception."""

    def __init__(self, modifier_id: str) -> None:
        super().__init__(
            message=f"Modifier with id {modifier_id} not found",
            code="MODIFIER_NOT_FOUND",
            status_code=404,
        )


class RateStateConflictException(RateServiceError):
    """Rate already in the requested state."""

    def __init__(self, rate_id: str, state: str) -> None:
        super().__init__(
            message=f"Rate {rate_id} is already {state}",
            code="RATE_STATE_CONFLICT",
            status_code=409,
        )


class InvalidSeasonalRuleException(DomainException):
    """Invalid seasonal pricing rule exception."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="INVALID_SEASONAL_RULE")


class SeasonalRuleNotFoundException(DomainException):
    """Seasonal rule not found exception."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(
            message=f"Seasonal rule with id {rule_id} not found",
            code="SEASONAL_RULE_NOT_FOUND",
            status_code=404,
        )


class InvalidDynamicConfigException(DomainException):
    """Invalid dynamic or weekend pricing configuration."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="INVALID_DYNAMIC_CONFIG")


class InvalidOrderException(DomainException):
    """Order request cannot be priced."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="INVALID_ORDER")


class RedemptionServiceUnavailableException(DomainException):
    """Redemption service unavailable exception."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            message=f"Redemption service is unavailable ({operation})",
            code="REDEMPTION_SERVICE_UNAVAILABLE",
            status_code=503,
        )
