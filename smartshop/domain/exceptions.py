"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced client, product, order or payment does not exist"""

    pass


class BusinessRuleViolation(DomainException):
    """Operation is well-formed but breaks a business rule"""

    pass


class ValidationFailure(DomainException):
    """Input has an invalid shape (non-positive quantity, empty order, ...)"""

    pass


class InvalidTransitionError(BusinessRuleViolation):
    """Status change not permitted from the current state"""

    def __init__(self, entity: str, current, target):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition {entity} from {current.value} to {target.value}")
