"""
DadCircles pipelines.

Multi-step operations composed from services.
"""

from dadcircles.pipelines.matching import run_matching_pass

__all__ = ["run_matching_pass"]
