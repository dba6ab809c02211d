"""
Ragdoll Doctor Package

Diagnoses and configures ragdoll rigs built from physical bones: classifies
bones by anatomical role, detects deviations from the physics standard,
applies and restores fixes, and configures whole humanoid rigs in one pass.
"""

from .session import RagdollSession

__all__ = ["RagdollSession"]
