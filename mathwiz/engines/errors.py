"""
Errors raised by the engines for caller-supplied invalid input.

All derive from ValueError so routers can translate them the same way they
translate any other bad-input error.
"""


class MasteryError(ValueError):
    """Base class for engine input errors."""


class InvalidAttempt(MasteryError):
    """An attempt outcome that cannot be recorded."""


class InvalidArgument(MasteryError):
    """An argument outside the domain of a policy function."""


class OnboardingAlreadyCompleted(MasteryError):
    """Onboarding may only be completed once per profile."""
