"""
Ragdoll Doctor Issue Detection Module

Scans a rigid-body hierarchy and reports every deviation from the physics
standard as an immutable Issue record. Scans are read-only; a new scan
supersedes the records of the previous one.

Checks, per bone and in this order:
- every capsule thinner than the minimum radius (CollisionTooSmall)
- a bone with no collision shape at all (MissingCollision)
- elbow/knee bones not using a hinge, shoulder/hip bones not using a
  cone (WrongJointType)

Only limb segments are checked for joint type: they are the only roles with a
single unambiguous correct type. Torso joints are covered by the health
check and by bulk configuration.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .classifier import classify
from .joints import JointType
from .rig import is_capsule, iter_bones
from .standard import CONE_ROLES, HINGE_ROLES, load_standard


class IssueKind(enum.Enum):
    COLLISION_TOO_SMALL = "collision_too_small"
    WRONG_JOINT_TYPE = "wrong_joint_type"
    MISSING_COLLISION = "missing_collision"


FIXABLE_KINDS = (IssueKind.COLLISION_TOO_SMALL, IssueKind.WRONG_JOINT_TYPE)


@dataclass(frozen=True, eq=False)
class Issue:
    """One detected deviation from the standard.

    Attributes:
        kind: What is wrong.
        bone: The host bone the issue was found on.
        bone_name: Name of that bone at scan time (backups are keyed by it).
        role: Anatomical role of the bone, or "unclassified".
        observed: Current value (capsule radius, joint type, shape count).
        recommended: Value the standard asks for.
        shape_index: Position of the capsule in the bone's shapes
            (collision issues only).
    """
    kind: IssueKind
    bone: Any
    bone_name: str
    role: str
    observed: Any
    recommended: Any
    shape_index: Optional[int] = None

    @property
    def fixable(self) -> bool:
        return self.kind in FIXABLE_KINDS


def expected_joint_type(role: str) -> Optional[JointType]:
    """Joint type the standard requires for a role, or None if it is not checked."""
    if role in HINGE_ROLES:
        return JointType.HINGE
    if role in CONE_ROLES:
        return JointType.CONE
    return None


def _bone_issues(bone, min_radius: float) -> List[Issue]:
    role = classify(bone.name)
    issues = []

    shapes = list(getattr(bone, "shapes", ()))
    for index, shape in enumerate(shapes):
        if is_capsule(shape) and shape.radius < min_radius:
            issues.append(Issue(
                kind=IssueKind.COLLISION_TOO_SMALL,
                bone=bone,
                bone_name=bone.name,
                role=role,
                observed=shape.radius,
                recommended=min_radius,
                shape_index=index,
            ))

    if not shapes:
        issues.append(Issue(
            kind=IssueKind.MISSING_COLLISION,
            bone=bone,
            bone_name=bone.name,
            role=role,
            observed=0,
            recommended=1,
        ))

    expected = expected_joint_type(role)
    if expected is not None and bone.joint_type != expected:
        issues.append(Issue(
            kind=IssueKind.WRONG_JOINT_TYPE,
            bone=bone,
            bone_name=bone.name,
            role=role,
            observed=bone.joint_type,
            recommended=expected,
        ))

    return issues


def detect_issues(root, standard: Optional[Dict] = None) -> List[Issue]:
    """Scan the direct bone children of `root` and return their issues.

    Args:
        root: Rigid-body hierarchy root.
        standard: Standard from `load_standard()`; defaults to the built-in one.

    Returns:
        Issues in child order, each bone's issues in check order.
    """
    if standard is None:
        standard = load_standard()
    min_radius = standard["collision_min_radius"]

    issues: List[Issue] = []
    for bone in iter_bones(root):
        issues.extend(_bone_issues(bone, min_radius))
    return issues
