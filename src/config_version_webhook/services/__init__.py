"""
Services package - the annotation synchronization pipeline.

Each module is one stage of a mutation: volume resolution, reference
tracking against the resource store, annotation diffing and patch building,
sequenced by MutationService.
"""

from .mutation_service import MutationResult, MutationService

__all__ = ["MutationService", "MutationResult"]
