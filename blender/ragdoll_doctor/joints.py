"""
Ragdoll Doctor Joints Module

Joint types and their constraint records. Each joint type that carries
parameters has exactly one record class, tagged with the joint type it
belongs to, so a bone's constraints can never name a field its joint
does not have.

All angles are in degrees.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union


class JointType(enum.Enum):
    """Joint type of a physical bone."""
    NONE = "none"
    PIN = "pin"
    CONE = "cone"
    HINGE = "hinge"
    SLIDER = "slider"
    SIXDOF = "sixdof"


@dataclass(frozen=True)
class HingeConstraints:
    """Single-axis rotation (elbows, knees)."""
    lower: float = 0.0
    upper: float = 150.0
    stiffness: float = 0.0
    damping: float = 1.0

    joint_type = JointType.HINGE


@dataclass(frozen=True)
class ConeConstraints:
    """Swing-and-twist rotation (shoulders, hips, neck)."""
    swing: float = 45.0
    twist: float = 30.0
    bias: float = 0.3
    softness: float = 0.8
    relaxation: float = 1.0

    joint_type = JointType.CONE


@dataclass(frozen=True)
class PinConstraints:
    """Point joint. Used limited (spine, chest) through its bias."""
    bias: float = 0.3
    damping: float = 1.0

    joint_type = JointType.PIN


JointConstraints = Union[HingeConstraints, ConeConstraints, PinConstraints]


def constraints_match(joint_type: JointType, constraints: Optional[JointConstraints]) -> bool:
    """Return True if `constraints` is the right record for `joint_type`.

    Joint types without parameters (NONE, SLIDER, SIXDOF) only match None.
    """
    if constraints is None:
        return joint_type in (JointType.NONE, JointType.SLIDER, JointType.SIXDOF)
    return constraints.joint_type == joint_type


def set_joint(bone, joint_type: JointType, constraints: Optional[JointConstraints]) -> None:
    """Write a joint type and its constraint record onto a bone."""
    if not constraints_match(joint_type, constraints):
        raise ValueError(
            f"{type(constraints).__name__} does not belong to joint type {joint_type.value}"
        )
    bone.joint_type = joint_type
    bone.joint_constraints = constraints
