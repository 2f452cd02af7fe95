"""
Prometheus metrics for the rental booking core.

Service timings are fed by the @measure_operation decorator; the domain
counters track booking transitions, OTP checks and reservation conflicts.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram

# Custom registry so importing the package never touches the global default
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "rental_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "rental_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "rental_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_transitions_total = Counter(
    "rental_booking_transitions_total",
    "Booking status transitions committed",
    ["from_status", "to_status"],
    registry=REGISTRY,
)

booking_conflicts_total = Counter(
    "rental_booking_conflicts_total",
    "Booking requests rejected because the vehicle was already reserved",
    ["stage"],  # precheck | reserve
    registry=REGISTRY,
)

otp_verifications_total = Counter(
    "rental_otp_verifications_total",
    "OTP verification attempts",
    ["purpose", "result"],  # result: valid | invalid
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'create_booking')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def inc_booking_transition(from_status: str, to_status: str) -> None:
        booking_transitions_total.labels(from_status=from_status, to_status=to_status).inc()

    @staticmethod
    def inc_booking_conflict(stage: str) -> None:
        booking_conflicts_total.labels(stage=stage).inc()

    @staticmethod
    def inc_otp_verification(purpose: str, valid: bool) -> None:
        otp_verifications_total.labels(
            purpose=purpose, result="valid" if valid else "invalid"
        ).inc()


# Singleton instance
prometheus_metrics = PrometheusMetrics()
