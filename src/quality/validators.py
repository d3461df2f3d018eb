"""
Report Validation Module

Rule-based consistency checks run on a freshly built SalesReport before it
is published. The checks encode the aggregation invariants:

- Bucket reconciliation (daily == weekly == monthly == total revenue)
- Metadata counts add up to the number of orders
- Rankings are bounded and sorted
- Storeless orders stay out of store-scoped views
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import structlog

from src.aggregation.buckets import Granularity
from src.aggregation.ranking import RankField, sort_value
from src.aggregation.report import SalesReport

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Report should not be published
    WARNING = "warning"  # Logged, report still published
    INFO = "info"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100

    @property
    def failures(self) -> List[ValidationCheck]:
        return [c for c in self.checks if not c.passed]


def _bucket_sums(records: Iterable[Any], granularity: Granularity) -> Decimal:
    return sum(
        (totals.revenue for record in records for totals in record.buckets(granularity).values()),
        Decimal("0"),
    )


class ReportValidator:
    """
    Validator for assembled sales reports.

    Example:
        validator = ReportValidator()
        validator.add_reconciliation_check("products")
        result = validator.validate(report)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[SalesReport], ValidationCheck]] = []

    def reset(self) -> None:
        self._checks = []

    def add_reconciliation_check(
        self,
        dimension: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "ReportValidator":
        """Add check that every granularity sums to the total revenue for a dimension"""
        def check(report: SalesReport) -> ValidationCheck:
            if dimension == "products":
                records: Sequence[Any] = report.products
                expected = sum((p.total.revenue for p in records), Decimal("0"))
            elif dimension == "stores":
                records = report.stores
                expected = sum((s.total.revenue for s in records), Decimal("0"))
            else:
                records = [report.time_series]
                expected = report.time_series.total.revenue

            sums = {g.value: _bucket_sums(records, g) for g in Granularity}
            mismatched = {g: str(v) for g, v in sums.items() if v != expected}
            passed = not mismatched

            return ValidationCheck(
                name=f"reconcile_{dimension}",
                passed=passed,
                severity=severity,
                message=(
                    f"{dimension} buckets reconcile to {expected}" if passed
                    else f"{dimension} buckets do not reconcile to {expected}: {mismatched}"
                ),
                details={"total": str(expected), **{g: str(v) for g, v in sums.items()}},
            )

        self._checks.append(check)
        return self

    def add_order_count_check(
        self,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "ReportValidator":
        """Add check that order counts in the metadata are consistent"""
        def check(report: SalesReport) -> ValidationCheck:
            meta = report.metadata
            identified_sum = meta.store_identified_count + meta.store_unidentified_count
            store_orders = sum(s.total.orders for s in report.stores)
            passed = (
                meta.total_orders == meta.order_count
                and identified_sum == meta.order_count
                and store_orders == meta.store_identified_count
            )
            return ValidationCheck(
                name="order_counts",
                passed=passed,
                severity=severity,
                message="Order counts are consistent" if passed else "Order counts do not add up",
                details={
                    "order_count": meta.order_count,
                    "total_orders": meta.total_orders,
                    "identified_plus_unidentified": identified_sum,
                    "store_orders": store_orders,
                },
            )

        self._checks.append(check)
        return self

    def add_ranking_check(
        self,
        ranking: str,
        limit: int,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "ReportValidator":
        """Add check that a top-N list is bounded and sorted by revenue"""
        def check(report: SalesReport) -> ValidationCheck:
            source = {
                "top_products": report.products,
                "top_stores": report.stores,
                "top_combinations": report.matrix,
            }[ranking]
            ranked = getattr(report, ranking)
            values = [sort_value(r, RankField.REVENUE) for r in ranked]
            expected_length = min(limit, len(source))
            is_sorted = all(a >= b for a, b in zip(values, values[1:]))
            passed = len(ranked) == expected_length and is_sorted

            return ValidationCheck(
                name=f"ranking_{ranking}",
                passed=passed,
                severity=severity,
                message=(
                    f"{ranking} holds {len(ranked)} records in descending order" if passed
                    else f"{ranking} has {len(ranked)} records (expected {expected_length}), sorted={is_sorted}"
                ),
                details={"length": len(ranked), "expected_length": expected_length, "sorted": is_sorted},
            )

        self._checks.append(check)
        return self

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[SalesReport], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "ReportValidator":
        """Add custom validation check"""
        def check(report: SalesReport) -> ValidationCheck:
            try:
                passed = bool(check_func(report))
            except Exception as e:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Check failed with error: {e}",
                )
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else message_on_fail,
            )

        self._checks.append(check)
        return self

    def validate(self, report: SalesReport) -> ValidationResult:
        """
        Run all registered checks against a report.

        Args:
            report: Report to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.now(timezone.utc)
        results = []

        logger.info("Running report validation", checks=len(self._checks))

        for check_func in self._checks:
            result = check_func(report)
            results.append(result)

            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        validation_result = ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )

        logger.info(
            f"Validation complete: {status.value}",
            passed=passed_checks,
            failed=failed_checks,
            warnings=warning_count,
        )

        return validation_result


def _storeless_orders_excluded(report: SalesReport) -> bool:
    return all(s.store_name for s in report.stores) and all(m.store_name for m in report.matrix)


def create_report_validator(
    top_products_limit: int = 10,
    top_stores_limit: int = 10,
    top_combinations_limit: int = 20,
) -> ReportValidator:
    """Create pre-configured validator for sales reports"""
    return (
        ReportValidator()
        .add_reconciliation_check("products")
        .add_reconciliation_check("stores")
        .add_reconciliation_check("time")
        .add_order_count_check()
        .add_ranking_check("top_products", top_products_limit)
        .add_ranking_check("top_stores", top_stores_limit)
        .add_ranking_check("top_combinations", top_combinations_limit)
        .add_custom_check(
            "storeless_orders_excluded",
            _storeless_orders_excluded,
            "Store-scoped views contain records without a store label",
        )
    )
