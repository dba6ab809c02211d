"""
Ragdoll Doctor Standard Module

The hand-authored physics-quality standard every check and fix is measured
against: the minimum collision size, which joint type each limb segment must
use, and the full per-role joint, mass and damping table used when a rig is
configured from scratch.

Key functions:
- load_standard(): Copy of the standard with optional overrides merged in
- role_entry(): Standard entry for one anatomical role
- hinge_constraints() / cone_constraints(): Constraint records for a role
"""

import copy
from typing import Any, Dict, Optional

from .joints import ConeConstraints, HingeConstraints, JointType, PinConstraints


# =============================================================================
# Constants
# =============================================================================

# Capsules thinner than this tunnel through each other and the floor
COLLISION_MIN_RADIUS = 0.02

# Threshold used by the health reporter
HEALTH_MIN_RADIUS = 0.01

# Shared hinge limits for elbows and knees
HINGE_DEFAULTS = {
    "lower": 0.0,
    "upper": 150.0,
    "stiffness": 0.0,
    "damping": 1.0,
}

# Shared cone-twist solver settings
CONE_DEFAULTS = {
    "bias": 0.3,
    "softness": 0.8,
    "relaxation": 1.0,
}

# Limb segments with a single correct joint type
HINGE_ROLES = ("forearm_l", "forearm_r", "shin_l", "shin_r")
CONE_ROLES = ("upper_arm_l", "upper_arm_r", "thigh_l", "thigh_r")

# Per-role standard. Keys are optional: a role without "joint" keeps its
# joint untouched, a role without "mass"/"damping" keeps those values.
# Pin bias 0.3 / 0.2 is the 30 / 20 degree equivalent for spine and chest.
ROLE_STANDARDS = {
    "hips": {"mass": 15.0, "damping": 0.2},
    "spine": {"joint": JointType.PIN, "bias": 0.3, "mass": 10.0, "damping": 0.2},
    "chest": {"joint": JointType.PIN, "bias": 0.2, "mass": 8.0, "damping": 0.2},
    "neck": {"joint": JointType.CONE, "swing": 60.0, "twist": 30.0},
    "head": {"mass": 5.0, "damping": 0.3},
    # Arms
    "upper_arm_l": {"joint": JointType.CONE, "swing": 90.0, "twist": 45.0, "mass": 3.0, "damping": 0.3},
    "upper_arm_r": {"joint": JointType.CONE, "swing": 90.0, "twist": 45.0, "mass": 3.0, "damping": 0.3},
    "forearm_l": {"joint": JointType.HINGE, "mass": 2.0, "damping": 0.3},
    "forearm_r": {"joint": JointType.HINGE, "mass": 2.0, "damping": 0.3},
    "hand_l": {"joint": JointType.CONE, "swing": 40.0, "twist": 20.0, "mass": 0.5, "damping": 0.3},
    "hand_r": {"joint": JointType.CONE, "swing": 40.0, "twist": 20.0, "mass": 0.5, "damping": 0.3},
    # Legs
    "thigh_l": {"joint": JointType.CONE, "swing": 45.0, "twist": 30.0, "mass": 8.0, "damping": 0.2},
    "thigh_r": {"joint": JointType.CONE, "swing": 45.0, "twist": 30.0, "mass": 8.0, "damping": 0.2},
    "shin_l": {"joint": JointType.HINGE, "mass": 5.0, "damping": 0.2},
    "shin_r": {"joint": JointType.HINGE, "mass": 5.0, "damping": 0.2},
    "foot_l": {"joint": JointType.CONE, "swing": 30.0, "twist": 15.0, "mass": 1.0, "damping": 0.3},
    "foot_r": {"joint": JointType.CONE, "swing": 30.0, "twist": 15.0, "mass": 1.0, "damping": 0.3},
}

_ROLE_OVERRIDE_KEYS = {"mass", "damping", "swing", "twist", "bias"}

_OVERRIDE_KEYS = {"collision_min_radius", "health_min_radius", "hinge", "cone", "roles"}


# =============================================================================
# Loading
# =============================================================================

def load_standard(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build the standard, optionally adjusted by an overrides dict.

    Args:
        overrides: Optional dictionary with keys:
            - collision_min_radius: float
            - health_min_radius: float
            - hinge: dict of lower/upper/stiffness/damping
            - cone: dict of bias/softness/relaxation
            - roles: dict mapping role name to mass/damping/swing/twist/bias

    Returns:
        A fresh dictionary; mutating it never touches the module constants.

    Raises:
        ValueError: If an override key or role is not recognized.
    """
    standard = {
        "collision_min_radius": COLLISION_MIN_RADIUS,
        "health_min_radius": HEALTH_MIN_RADIUS,
        "hinge": dict(HINGE_DEFAULTS),
        "cone": dict(CONE_DEFAULTS),
        "roles": copy.deepcopy(ROLE_STANDARDS),
    }
    if not overrides:
        return standard

    unknown = set(overrides) - _OVERRIDE_KEYS
    if unknown:
        raise ValueError(f"Unknown standard override(s): {', '.join(sorted(unknown))}")

    for key in ("collision_min_radius", "health_min_radius"):
        if key in overrides:
            value = float(overrides[key])
            if value <= 0.0:
                raise ValueError(f"{key} must be positive, got {value}")
            standard[key] = value

    for section, defaults in (("hinge", HINGE_DEFAULTS), ("cone", CONE_DEFAULTS)):
        values = overrides.get(section, {})
        for name, value in values.items():
            if name not in defaults:
                raise ValueError(f"Unknown {section} setting: {name}")
            standard[section][name] = float(value)

    for role, values in overrides.get("roles", {}).items():
        if role not in standard["roles"]:
            raise ValueError(f"Unknown role in standard overrides: {role}")
        for name, value in values.items():
            if name not in _ROLE_OVERRIDE_KEYS:
                raise ValueError(f"Unknown setting '{name}' for role {role}")
            standard["roles"][role][name] = float(value)

    return standard


# =============================================================================
# Lookups
# =============================================================================

def role_entry(role: str, standard: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Standard entry for a role, or an empty dict for unknown roles."""
    if standard is None:
        standard = load_standard()
    return standard["roles"].get(role, {})


def hinge_constraints(standard: Optional[Dict[str, Any]] = None) -> HingeConstraints:
    if standard is None:
        standard = load_standard()
    return HingeConstraints(**standard["hinge"])


def cone_constraints(role: str, standard: Optional[Dict[str, Any]] = None) -> ConeConstraints:
    """Cone record with the role's swing/twist spans and the shared solver settings."""
    if standard is None:
        standard = load_standard()
    entry = role_entry(role, standard)
    return ConeConstraints(
        swing=entry.get("swing", ConeConstraints.swing),
        twist=entry.get("twist", ConeConstraints.twist),
        **standard["cone"],
    )


def pin_constraints(role: str, standard: Optional[Dict[str, Any]] = None) -> PinConstraints:
    if standard is None:
        standard = load_standard()
    entry = role_entry(role, standard)
    return PinConstraints(bias=entry.get("bias", PinConstraints.bias))


def constraints_for(role: str, joint_type: JointType, standard: Optional[Dict[str, Any]] = None):
    """Standard constraint record for a role using the given joint type.

    Returns None for joint types that carry no parameters.
    """
    if joint_type == JointType.HINGE:
        return hinge_constraints(standard)
    if joint_type == JointType.CONE:
        return cone_constraints(role, standard)
    if joint_type == JointType.PIN:
        return pin_constraints(role, standard)
    return None
