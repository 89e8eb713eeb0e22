from itera.errors.base import BaseAppError


class PlanStateError(BaseAppError):
    """Raised when a plan mutation addresses a missing plan or slot."""

    def __init__(self, detail: str = "Plan state error") -> None:
        super().__init__(detail)
