"""Use cases for identity assignment.

Each use case represents a single user action and orchestrates
domain logic without knowing about infrastructure details.
"""

from .assign_identities import AssignIdentitiesUseCase, log_progress

__all__ = [
    "AssignIdentitiesUseCase",
    "log_progress",
]
