"""Static prerequisite table between validators.

A step whose prerequisites have not completed in the current run is skipped,
not failed.
"""

from __future__ import annotations

from typing import Iterable

from order_gate.domain.states import ValidatorName

VALIDATOR_DEPENDENCIES: dict[ValidatorName, tuple[ValidatorName, ...]] = {
    ValidatorName.CUSTOMER_STATUS: (ValidatorName.CUSTOMER_EXISTS,),
    ValidatorName.GEOLOCATION_GATHER: (ValidatorName.GEOLOCATION_SUPPORT,),
    ValidatorName.GEOFENCING_VALIDATE: (ValidatorName.GEOLOCATION_GATHER,),
}


def dependencies_of(name: ValidatorName) -> tuple[ValidatorName, ...]:
    return VALIDATOR_DEPENDENCIES.get(ValidatorName(name), ())


def missing_dependencies(
    name: ValidatorName, completed: Iterable[str]
) -> list[ValidatorName]:
    done = {ValidatorName(step) for step in completed}
    return [dep for dep in dependencies_of(name) if dep not in done]


def dependencies_met(name: ValidatorName, completed: Iterable[str]) -> bool:
    return not missing_dependencies(name, completed)


def order_warnings(steps: Iterable[ValidatorName]) -> list[str]:
    """Describe steps listed before one of their prerequisites.

    Such a step can never run (its prerequisite has not completed yet when it
    is reached), which is almost always a configuration mistake.
    """
    warnings = []
    seen: set[ValidatorName] = set()
    ordered = [ValidatorName(step) for step in steps]
    configured = set(ordered)
    for step in ordered:
        for dep in dependencies_of(step):
            if dep in configured and dep not in seen:
                warnings.append(
                    f"'{step.value}' is configured before its dependency '{dep.value}'"
                )
        seen.add(step)
    return warnings
