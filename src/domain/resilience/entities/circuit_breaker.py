from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class CircuitState(Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


@dataclass
class CircuitBreaker:
    """
    Failure counter for an upstream dependency (GitHub).

    CLOSED lets calls through, OPEN rejects them until reset_timeout_seconds
    have passed since the last failure, HALF_OPEN lets calls through until
    half_open_max_calls successes close the circuit or one failure reopens it.
    """

    name: str
    failure_threshold: int = 5
    reset_timeout_seconds: int = 60
    half_open_max_calls: int = 2
    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    last_failure_time: datetime | None = None
    success_count_in_half_open: int = 0

    def record_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self.success_count_in_half_open += 1
            if self.success_count_in_half_open >= self.half_open_max_calls:
                self._close()
        elif self.state == CircuitState.CLOSED:
            self.failure_count = 0

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = datetime.now(timezone.utc)

        if self.state == CircuitState.HALF_OPEN:
            self._open()
        elif self.state == CircuitState.CLOSED and self.failure_count >= self.failure_threshold:
            self._open()

    def can_execute(self) -> bool:
        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                self._half_open()
                return True
            return False
        return True

    def seconds_until_retry(self) -> int:
        if self.state != CircuitState.OPEN or not self.last_failure_time:
            return 0
        elapsed = (datetime.now(timezone.utc) - self.last_failure_time).total_seconds()
        return max(0, int(self.reset_timeout_seconds - elapsed))

    def _open(self) -> None:
        self.state = CircuitState.OPEN
        self.failure_count = 0
        self.success_count_in_half_open = 0

    def _half_open(self) -> None:
        self.state = CircuitState.HALF_OPEN
        self.success_count_in_half_open = 0

    def _close(self) -> None:
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count_in_half_open = 0
        self.last_failure_time = None

    def _should_attempt_reset(self) -> bool:
        if not self.last_failure_time:
            return True
        elapsed = (datetime.now(timezone.utc) - self.last_failure_time).total_seconds()
        return elapsed >= self.reset_timeout_seconds

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "retry_after_seconds": self.seconds_until_retry(),
        }
