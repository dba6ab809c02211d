"""
Ragdoll Doctor Bulk Configuration Module

Configures a whole humanoid ragdoll from scratch: every recognized bone gets
the standard joint type, joint limits, mass and damping for its role.

This is an overwrite, not a diff. Whatever a bone had before (including
manual tuning) is replaced, and nothing is backed up. Use the fix/restore
path for incremental, undoable corrections.
"""

from typing import Dict, List, Optional

from .joints import set_joint
from .standard import constraints_for, load_standard, role_entry


def configure_role(bone, role: str, standard: Dict) -> None:
    """Write the standard entry for `role` onto one bone.

    Keys missing from the role's entry leave the matching bone values alone.
    """
    entry = role_entry(role, standard)

    joint_type = entry.get("joint")
    if joint_type is not None:
        set_joint(bone, joint_type, constraints_for(role, joint_type, standard))

    if "mass" in entry:
        bone.mass = entry["mass"]

    if "damping" in entry:
        bone.linear_damp = entry["damping"]
        bone.angular_damp = entry["damping"]


def configure_bones(bone_map: Dict[str, object], standard: Optional[Dict] = None) -> List[str]:
    """Apply the full standard to every bone in a role -> bone map.

    Args:
        bone_map: Mapping from `build_bone_map()`. Roles that are absent are
            left untouched; roles the standard does not know are skipped.
        standard: Standard from `load_standard()`; defaults to the built-in one.

    Returns:
        Names of the configured bones, in map order.
    """
    if standard is None:
        standard = load_standard()

    configured = []
    for role, bone in bone_map.items():
        if role not in standard["roles"]:
            print(f"Warning: No standard for role '{role}', skipping '{bone.name}'")
            continue
        configure_role(bone, role, standard)
        configured.append(bone.name)
    return configured
