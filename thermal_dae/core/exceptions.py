"""
Exception hierarchy for network construction and assembly.

Every error is raised while components are built or while the graph is
assembled, never deferred to the numerical solver.
"""

from typing import Optional


class ThermalDAEError(Exception):
    """Base class for all errors raised by thermal_dae."""

    def __init__(self, message: str, component: Optional[str] = None):
        self.component = component
        if component is not None:
            message = f"[{component}] {message}"
        super().__init__(message)


class ValidationError(ThermalDAEError, ValueError):
    """
    Invalid construction input: non-positive capacitance, bad subdivision
    count, mismatched port kinds, reuse of an already connected port, ...
    """
    pass


class StructuralError(ThermalDAEError):
    """
    Assembled system is structurally unbalanced.

    Raised when the equation count differs from the unknown count, when no
    perfect equation/unknown matching exists, or when an equation refers to
    a variable that no component declared.
    """
    pass


class SingularParameterError(ThermalDAEError, ZeroDivisionError):
    """A zero resistance or conductance was inverted into the dual formulation."""
    pass
