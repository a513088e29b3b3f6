"""
Bulk discount batches

Applies or removes a discount across a selection of products, one product at
a time. A failing product is recorded and the batch moves on; the batch itself
only fails up front, when the requested percentage is invalid.
"""
import logging
import threading
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from catalog_admin.services.discount_client import DiscountService
from catalog_admin.services.errors import BatchInProgressError, DiscountError, DiscountValidationError
from catalog_admin.utils.discount import HUNDRED, Number, format_discount_percentage, to_decimal, validate_price

logger = logging.getLogger(__name__)

INVALID_BULK_DISCOUNT = "Please enter a valid discount percentage between 1 and 99."

Scheduler = Callable[[float, Callable[[], None]], Any]


class BulkDiscountMode(str, Enum):
    APPLY_PERCENTAGE = "percentage"
    REMOVE_ALL = "remove"


class BatchOutcome(str, Enum):
    ALL_SUCCEEDED = "allSucceeded"
    PARTIAL_FAILURE = "partialFailure"
    ALL_FAILED = "allFailed"


@dataclass(frozen=True)
class PerItemError:
    product_id: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"productId": self.product_id, "error": self.message}


@dataclass(frozen=True)
class BatchProgress:
    """Read-only view of a batch after a processed item"""

    mode: BulkDiscountMode
    total: int
    current: int = 0
    success_count: int = 0
    failure_count: int = 0
    failures: Tuple[PerItemError, ...] = ()
    discount_percent: Optional[Decimal] = None

    @property
    def finished(self) -> bool:
        return self.current >= self.total

    @property
    def progress_percent(self) -> float:
        if self.total == 0:
            return 100.0
        return round(self.current / self.total * 100, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "discountPercentage": (
                format_discount_percentage(self.discount_percent) if self.discount_percent is not None else None
            ),
            "current": self.current,
            "total": self.total,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "failures": [failure.to_dict() for failure in self.failures],
            "progressPercent": self.progress_percent,
            "finished": self.finished,
        }


@dataclass(frozen=True)
class BatchResult:
    progress: BatchProgress
    outcome: BatchOutcome
    summary: str
    auto_close: bool

    @property
    def empty_target_set(self) -> bool:
        return self.progress.total == 0


def _schedule_with_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def validate_bulk_discount(mode: BulkDiscountMode, discount_percent: Number) -> Optional[Decimal]:
    """
    Check the percentage for an apply batch.

    Returns the parsed percentage (None in remove mode) or raises
    DiscountValidationError.
    """
    mode = BulkDiscountMode(mode)
    if mode is BulkDiscountMode.REMOVE_ALL:
        return None

    problem = validate_price(discount_percent, required=True, min_value=None, field_name="Discount percentage")
    if problem:
        raise DiscountValidationError(problem)

    discount = to_decimal(discount_percent)
    if discount <= 0 or discount >= HUNDRED:
        raise DiscountValidationError(INVALID_BULK_DISCOUNT)
    return discount


def summarize(progress: BatchProgress) -> str:
    applying = progress.mode is BulkDiscountMode.APPLY_PERCENTAGE

    if progress.total == 0:
        return "No products selected"

    if progress.failure_count == 0:
        if applying:
            return (
                f"Successfully applied {format_discount_percentage(progress.discount_percent)}% discount "
                f"to {progress.success_count} products"
            )
        return f"Successfully removed discounts from {progress.success_count} products"

    if applying:
        return (
            f"Applied discount to {progress.success_count} products. "
            f"Failed for {progress.failure_count} products."
        )
    return (
        f"Removed discount from {progress.success_count} products. "
        f"Failed for {progress.failure_count} products."
    )


class BulkDiscountOrchestrator:
    """
    Runs one bulk discount batch at a time against a discount service.

    Products are processed strictly in the given order with at most one
    remote call in flight. Duplicated product ids are processed once per
    occurrence. Failed calls are not retried.
    """

    def __init__(
        self,
        service: DiscountService,
        close_delay: float = 1.5,
        scheduler: Optional[Scheduler] = None,
    ):
        self.service = service
        self.close_delay = close_delay
        self._scheduler = scheduler or _schedule_with_timer
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def iter_batch(
        self,
        targets: Iterable[str],
        mode: BulkDiscountMode,
        discount_percent: Number = None,
    ) -> Iterator[BatchProgress]:
        """
        Start a batch and yield a snapshot before the first product and
        after every processed product.

        Validation runs immediately, before the iterator is consumed.
        """
        if self._running:
            raise BatchInProgressError("A bulk discount is already being applied")

        mode = BulkDiscountMode(mode)
        discount = validate_bulk_discount(mode, discount_percent)
        product_ids = [str(product_id) for product_id in targets]
        return self._run(product_ids, mode, discount)

    def _run(
        self,
        product_ids: List[str],
        mode: BulkDiscountMode,
        discount: Optional[Decimal],
    ) -> Iterator[BatchProgress]:
        if self._running:
            raise BatchInProgressError("A bulk discount is already being applied")

        self._running = True
        try:
            progress = BatchProgress(mode=mode, total=len(product_ids), discount_percent=discount)
            failures: List[PerItemError] = []
            logger.info(
                f"Bulk discount started: mode={mode.value} products={progress.total}"
                + (f" discount={format_discount_percentage(discount)}%" if discount is not None else "")
            )
            yield progress

            for product_id in product_ids:
                try:
                    if mode is BulkDiscountMode.APPLY_PERCENTAGE:
                        self.service.apply_discount(product_id, discount)
                    else:
                        self.service.remove_discount(product_id)
                    progress = replace(
                        progress,
                        current=progress.current + 1,
                        success_count=progress.success_count + 1,
                    )
                except Exception as e:
                    message = self._failure_message(e, mode)
                    logger.warning(f"Bulk discount failed for product {product_id}: {message}")
                    failures.append(PerItemError(product_id=product_id, message=message))
                    progress = replace(
                        progress,
                        current=progress.current + 1,
                        failure_count=progress.failure_count + 1,
                        failures=tuple(failures),
                    )
                yield progress

            logger.info(f"Bulk discount finished: {summarize(progress)}")
        finally:
            self._running = False

    @staticmethod
    def _failure_message(error: Exception, mode: BulkDiscountMode) -> str:
        message = error.message if isinstance(error, DiscountError) else str(error)
        if message:
            return message
        action = "apply" if mode is BulkDiscountMode.APPLY_PERCENTAGE else "remove"
        return f"Failed to {action} discount"

    def run_batch(
        self,
        targets: Iterable[str],
        mode: BulkDiscountMode,
        discount_percent: Number = None,
        on_progress: Optional[Callable[[BatchProgress], None]] = None,
        on_complete: Optional[Callable[[BatchResult], None]] = None,
    ) -> BatchResult:
        """
        Run a whole batch and report the outcome.

        on_progress receives every snapshot. When every product succeeded,
        on_complete is scheduled after close_delay so the success summary can
        be read first; after any failure it is not called and the failure list
        stays available on the result.
        """
        progress = None
        for progress in self.iter_batch(targets, mode, discount_percent):
            if on_progress:
                on_progress(progress)

        result = self._result(progress)
        if result.auto_close and on_complete:
            if result.empty_target_set:
                on_complete(result)
            else:
                self._scheduler(self.close_delay, lambda: on_complete(result))
        return result

    @staticmethod
    def _result(progress: BatchProgress) -> BatchResult:
        if progress.failure_count == 0:
            outcome = BatchOutcome.ALL_SUCCEEDED
        elif progress.success_count == 0:
            outcome = BatchOutcome.ALL_FAILED
        else:
            outcome = BatchOutcome.PARTIAL_FAILURE

        return BatchResult(
            progress=progress,
            outcome=outcome,
            summary=summarize(progress),
            auto_close=outcome is BatchOutcome.ALL_SUCCEEDED,
        )
