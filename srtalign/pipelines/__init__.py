"""Pipeline modules for orchestrating complex workflows."""

from .bitext_pipeline import BitextAlignmentConfig, BitextAlignmentPipeline

__all__ = [
    "BitextAlignmentConfig",
    "BitextAlignmentPipeline",
]
