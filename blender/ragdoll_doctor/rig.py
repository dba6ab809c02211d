"""
Ragdoll Doctor Rig Module

Plain-Python host model for rigid-body hierarchies, plus the helpers the
engines use to walk any host's hierarchy.

A host hierarchy is anything exposing `name` and `children`. The root of a
ragdoll carries a truthy `is_bone_simulator`, bones carry a truthy
`is_physical_bone`. The dataclasses below are the reference implementation
of that protocol; `blender_host` provides another one.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .errors import EmptySelection, NoHierarchyFound
from .joints import JointConstraints, JointType


# =============================================================================
# Collision Shapes
# =============================================================================

@dataclass
class CapsuleShape:
    radius: float = 0.05
    height: float = 0.2

    kind = "capsule"


@dataclass
class SphereShape:
    radius: float = 0.05

    kind = "sphere"


@dataclass
class BoxShape:
    size: Tuple[float, float, float] = (0.1, 0.1, 0.1)

    kind = "box"


def is_capsule(shape) -> bool:
    return getattr(shape, "kind", None) == "capsule"


# =============================================================================
# Nodes
# =============================================================================

@dataclass
class PhysicalBone:
    """A rigid body driving one skeleton bone."""
    name: str
    joint_type: JointType = JointType.NONE
    joint_constraints: Optional[JointConstraints] = None
    mass: float = 1.0
    linear_damp: float = 0.0
    angular_damp: float = 0.0
    shapes: List = field(default_factory=list)
    children: List = field(default_factory=list)

    is_physical_bone = True


@dataclass
class BoneSimulator:
    """Root of a rigid-body hierarchy; its direct bone children form the ragdoll."""
    name: str = "PhysicalBoneSimulator"
    children: List = field(default_factory=list)

    is_bone_simulator = True


@dataclass
class SceneNode:
    """Any other scene node (skeleton, mesh, group)."""
    name: str
    children: List = field(default_factory=list)


# =============================================================================
# Hierarchy Helpers
# =============================================================================

def is_physical_bone(node) -> bool:
    return bool(getattr(node, "is_physical_bone", False))


def is_bone_simulator(node) -> bool:
    return bool(getattr(node, "is_bone_simulator", False))


def iter_bones(root) -> Iterator:
    """Yield the direct physical-bone children of a hierarchy root, in order."""
    for child in getattr(root, "children", ()):
        if is_physical_bone(child):
            yield child


def find_bone(root, name: str):
    """Return the first direct bone named `name`, or None."""
    for bone in iter_bones(root):
        if bone.name == name:
            return bone
    return None


def find_simulator(selection):
    """Resolve the rigid-body hierarchy root for a user selection.

    The selection itself is returned when it is a simulator; otherwise its
    descendants are searched depth-first.

    Raises:
        EmptySelection: If nothing is selected.
        NoHierarchyFound: If no simulator exists at or below the selection.
    """
    if selection is None:
        raise EmptySelection("Select a node first")

    stack = [selection]
    while stack:
        node = stack.pop()
        if is_bone_simulator(node):
            return node
        stack.extend(reversed(list(getattr(node, "children", ()))))

    raise NoHierarchyFound(f"No rigid-body hierarchy found under '{getattr(selection, 'name', selection)}'")


def find_duplicate_names(root) -> List[str]:
    """Bone names used more than once under `root` (restore is keyed by name)."""
    seen = set()
    duplicates = []
    for bone in iter_bones(root):
        if bone.name in seen and bone.name not in duplicates:
            duplicates.append(bone.name)
        seen.add(bone.name)
    return duplicates
