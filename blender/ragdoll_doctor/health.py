"""
Ragdoll Doctor Health Check Module

A quick, role-agnostic sanity pass producing one human-readable line per
problem. It does not classify bones: it flags bones without collision,
capsules below the health threshold, and every unconstrained Pin joint.
"""

from typing import Dict, List, Optional

from .joints import JointType
from .rig import is_capsule, iter_bones
from .standard import load_standard


def check_health(root, standard: Optional[Dict] = None) -> List[str]:
    """Return problem descriptions for the bones under `root`, in child order."""
    if standard is None:
        standard = load_standard()
    threshold = standard["health_min_radius"]

    problems = []
    for bone in iter_bones(root):
        shapes = list(getattr(bone, "shapes", ()))
        if not shapes:
            problems.append(f"{bone.name}: missing collision shape")

        for shape in shapes:
            if is_capsule(shape) and shape.radius < threshold:
                problems.append(
                    f"{bone.name}: capsule radius {shape.radius:.3f} below {threshold:.3f}"
                )

        if bone.joint_type == JointType.PIN:
            problems.append(f"{bone.name}: unconstrained Pin joint")

    return problems
