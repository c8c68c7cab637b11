# jewelry_api/services/code_service.py
import logging
import re
import time
from dataclasses import dataclass

from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from jewelry_api.core.errors import CodeAllocationError, ValidationError
from jewelry_api.repositories.code_sequence_repo import CodeSequenceRepository

logger = logging.getLogger(__name__)

ORDER_FAMILY = "order"

# family -> code prefix
PRODUCT_CODE_PREFIXES: dict[str, str] = {
    "chain": "CH",
    "bracelet-anklet": "BR",
}
ORDER_CODE_PREFIX = "ORD"

# Minimum digits; longer sequences simply grow (CH1000)
CODE_MIN_DIGITS = 3

ORDER_CODE_RE = re.compile(r"^ORD\d{3,}$")
PRODUCT_CODE_RE = re.compile(r"^(CH|BR)\d{3,}$")


@dataclass(frozen=True)
class AllocatedCode:
    """
    Result of one allocation.

    degraded=True means the code is a timestamp fallback: it was not
    drawn from the counter and is not collision-checked.
    """

    code: str
    sequence: int | None
    degraded: bool = False


def format_code(prefix: str, sequence: int) -> str:
    return f"{prefix}{sequence:0{CODE_MIN_DIGITS}d}"


def is_valid_order_code(code: str) -> bool:
    return bool(ORDER_CODE_RE.match(code))


def is_valid_product_code(code: str) -> bool:
    return bool(PRODUCT_CODE_RE.match(code))


class CodeAllocator:
    """
    Hands out unique, monotonically increasing codes per family.

    Each attempt:
      1. Atomically increments the family counter (UPDATE ... RETURNING).
      2. Formats the code.
      3. Re-checks that no product/order already carries it
         (guards against rows inserted outside the allocator).
      4. On collision, tries again with the next number.

    Attempts are bounded by max_attempts; exhaustion raises
    CodeAllocationError.

    Runs inside the caller's session and never commits: the caller
    commits the code together with the row that uses it.
    """

    def __init__(self, repo: CodeSequenceRepository, max_attempts: int = 5):
        self.repo = repo
        self.max_attempts = max_attempts

    # ----- Public API -----

    def allocate_product_code(self, session: Session, product_type: str) -> str:
        if product_type not in PRODUCT_CODE_PREFIXES:
            raise ValidationError(
                f"Unknown product type '{product_type}'",
                details=[{"field": "product_type", "message": "must be one of "
                          + ", ".join(PRODUCT_CODE_PREFIXES)}],
            )
        allocated = self.allocate(session, product_type)
        return allocated.code

    def allocate_order_code(self, session: Session) -> AllocatedCode:
        """
        Allocate the next ORDxxx code.

        If the database fails mid-allocation, fall back to a
        timestamp-derived code flagged as degraded.
        """
        try:
            with session.begin_nested():
                return self.allocate(session, ORDER_FAMILY)
        except OperationalError:
            fallback = f"{ORDER_CODE_PREFIX}{str(int(time.time() * 1000))[-6:]}"
            logger.error(
                "Order code allocation failed, using DEGRADED timestamp code %s",
                fallback,
                exc_info=True,
            )
            return AllocatedCode(code=fallback, sequence=None, degraded=True)

    def allocate(self, session: Session, family: str) -> AllocatedCode:
        prefix = self._prefix_for(family)

        for attempt in range(1, self.max_attempts + 1):
            sequence = self._next_sequence(session, family)
            code = format_code(prefix, sequence)

            if not self._code_taken(session, family, code):
                logger.debug("Allocated %s (family=%s, attempt=%d)", code, family, attempt)
                return AllocatedCode(code=code, sequence=sequence)

            logger.warning(
                "Code collision on %s (family=%s, attempt %d/%d), retrying",
                code,
                family,
                attempt,
                self.max_attempts,
            )

        raise CodeAllocationError(family, self.max_attempts)

    # ----- Helpers -----

    @staticmethod
    def _prefix_for(family: str) -> str:
        if family == ORDER_FAMILY:
            return ORDER_CODE_PREFIX
        try:
            return PRODUCT_CODE_PREFIXES[family]
        except KeyError:
            raise ValueError(f"Unknown code family: {family}") from None

    def _next_sequence(self, session: Session, family: str) -> int:
        sequence = self.repo.increment(session, family)
        if sequence is None:
            self.repo.create_if_missing(session, family)
            sequence = self.repo.increment(session, family)
        if sequence is None:
            raise CodeAllocationError(family, 0)
        return sequence

    def _code_taken(self, session: Session, family: str, code: str) -> bool:
        if family == ORDER_FAMILY:
            return self.repo.order_code_exists(session, code)
        return self.repo.product_code_exists(session, code)
