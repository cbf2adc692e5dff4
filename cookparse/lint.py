"""
Checks for suspicious (but syntactically valid) components within a step.

The following function runs all of the non-fatal checks against the items of
a single step:

.. autofunction:: check

Each check yields :py:class:`~cookparse.diagnostics.Diagnostic` warnings:

.. autofunction:: check_timer_units

.. autofunction:: check_scaling_locks

The strict timer check produces errors rather than warnings and is only
applied when the ``strict_timers`` extension is enabled:

.. autofunction:: check_timer_quantities
"""

from typing import Iterable

from cookparse.diagnostics import (
    UNKNOWN_POSITION,
    Diagnostic,
    Severity,
)
from cookparse.recipe import Ingredient, StepItem, Timer


__all__ = [
    "check_timer_units",
    "check_scaling_locks",
    "check_timer_quantities",
    "check",
]


def check_timer_units(items: Iterable[StepItem]) -> Iterable[Diagnostic]:
    """
    Check for timers with a duration but no unit, for example::

        Simmer for ~{10}.

    It is not possible to know whether ten seconds, minutes or hours was
    intended.
    """
    for item in items:
        if isinstance(item, Timer) and item.units == "" and item.quantity != "":
            yield Diagnostic(
                "Invalid timer quantity: missing unit",
                item.position or UNKNOWN_POSITION,
                Severity.warning,
                "A timer needs a unit to know the duration",
            )


def check_scaling_locks(items: Iterable[StepItem]) -> Iterable[Diagnostic]:
    """
    Check for fixed ('=') quantities, for example::

        Add @salt{=1%tsp}.

    Scaling is not supported, so every quantity is fixed already.
    """
    for item in items:
        if isinstance(item, Ingredient) and item.fixed:
            yield Diagnostic(
                "Unnecessary scaling lock modifier",
                item.position or UNKNOWN_POSITION,
                Severity.warning,
            )


def check_timer_quantities(items: Iterable[StepItem]) -> Iterable[Diagnostic]:
    """
    Check for timers with neither a duration nor a unit, for example::

        Let it ~rest.
    """
    for item in items:
        if isinstance(item, Timer) and item.quantity == "" and item.units == "":
            yield Diagnostic(
                "Invalid timer: missing quantity",
                item.position or UNKNOWN_POSITION,
                Severity.error,
                "A timer needs a duration",
            )


def check(items: Iterable[StepItem]) -> Iterable[Diagnostic]:
    """
    Run all non-fatal checks against the items of a step.
    """
    items = list(items)
    yield from check_timer_units(items)
    yield from check_scaling_locks(items)
