from itera.errors.base import BaseAppError


class CircuitBreakerError(BaseAppError):
    """
    Raised when circuit breaker is open and rejecting requests.

    Includes retry information for callers to implement backoff.
    """

    def __init__(
        self,
        detail: str = "Service temporarily unavailable",
        retry_after: float = 0.0,
        circuit_name: str = "unknown",
    ) -> None:
        """
        Initialize CircuitBreakerError.

        Args:
            detail: Error message describing the issue.
            retry_after: Seconds until the circuit may allow requests again.
            circuit_name: Name of the circuit breaker that triggered the error.
        """
        super().__init__(detail)
        self.retry_after = retry_after
        self.circuit_name = circuit_name

    def __str__(self) -> str:
        """Return string representation with retry information."""
        if self.retry_after > 0:
            return f"{self.detail} (retry in {self.retry_after:.1f}s)"
        return self.detail
