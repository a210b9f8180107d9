"""Service layer for business logic."""

from fragments.services.fragment_service import FragmentService, RenderedFragment

__all__ = [
    "FragmentService",
    "RenderedFragment",
]
