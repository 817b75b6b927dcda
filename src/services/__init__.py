"""Scheduling, plan-transition, task and billing-reconciliation services."""

from src.services import (
    authorization,
    billing_checks,
    plan_transition,
    recurring_generator,
    referral_codes,
    schedule_generator,
    service_registry,
    task_service,
    usage_reporter,
)


__all__ = [
    "authorization",
    "billing_checks",
    "plan_transition",
    "recurring_generator",
    "referral_codes",
    "schedule_generator",
    "service_registry",
    "task_service",
    "usage_reporter",
]
