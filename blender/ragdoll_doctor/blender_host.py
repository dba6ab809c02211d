"""
Ragdoll Doctor Blender Host Module

Exposes Blender rigid-body objects through the bone protocol the engines use,
so a Blender panel can scan, fix and configure a ragdoll built from rigid
bodies and rigid-body constraints.

Mapping:
- hierarchy root: any object with at least one direct child carrying a rigid body
- bone: a child object with `rigid_body`; its joint is its own
  `rigid_body_constraint` (object1 = parent body, object2 = this body)
- capsule: `rigid_body.collision_shape == 'CAPSULE'`, Z-aligned, radius and
  height read from and written to the object dimensions
- joint constraints: angular limits on the Blender constraint; values Blender
  has no field for (hinge stiffness/damping, cone bias/softness/relaxation,
  pin bias/damping) live in custom properties on the object

Key functions:
- active_selection(): Wrap the active object as a selection for RagdollSession
"""

import math
from typing import List, Optional

# Blender modules - only available when running inside Blender
try:
    import bpy
    BLENDER_AVAILABLE = True
except ImportError:
    BLENDER_AVAILABLE = False

from .joints import ConeConstraints, HingeConstraints, JointType, PinConstraints


# Blender rigid body constraint type -> joint type
CONSTRAINT_TYPES = {
    "POINT": JointType.PIN,
    "HINGE": JointType.HINGE,
    "GENERIC": JointType.CONE,
    "SLIDER": JointType.SLIDER,
    "PISTON": JointType.SLIDER,
    "GENERIC_SPRING": JointType.SIXDOF,
    "FIXED": JointType.SIXDOF,
    "MOTOR": JointType.SIXDOF,
}

# Joint type -> Blender rigid body constraint type written by fixes
JOINT_CONSTRAINT_TYPES = {
    JointType.PIN: "POINT",
    JointType.HINGE: "HINGE",
    JointType.CONE: "GENERIC",
    JointType.SLIDER: "SLIDER",
    JointType.SIXDOF: "GENERIC_SPRING",
}

PROP_PREFIX = "ragdoll_"

_CONSTRAINT_PROPS = {
    JointType.HINGE: ("stiffness", "damping"),
    JointType.CONE: ("bias", "softness", "relaxation"),
    JointType.PIN: ("bias", "damping"),
}


# =============================================================================
# Shapes
# =============================================================================

class BlenderCapsule:
    """Capsule collision of a rigid-body object, sized by its dimensions."""

    kind = "capsule"

    def __init__(self, obj):
        self.obj = obj

    @property
    def radius(self) -> float:
        dims = self.obj.dimensions
        return max(dims[0], dims[1]) / 2.0

    @radius.setter
    def radius(self, value: float) -> None:
        x, y, z = self.obj.dimensions[0], self.obj.dimensions[1], self.obj.dimensions[2]
        old = max(x, y) / 2.0
        if old > 0.0:
            scale = value / old
            x, y = x * scale, y * scale
        else:
            x = y = value * 2.0
        self.obj.dimensions = (x, y, z)

    @property
    def height(self) -> float:
        return self.obj.dimensions[2]

    @height.setter
    def height(self, value: float) -> None:
        dims = self.obj.dimensions
        self.obj.dimensions = (dims[0], dims[1], value)


class BlenderShape:
    """Any non-capsule collision shape. Read-only."""

    def __init__(self, collision_shape: str):
        self.kind = collision_shape.lower()


# =============================================================================
# Bones
# =============================================================================

class BlenderBone:
    """A rigid-body object seen as a physical bone."""

    is_physical_bone = True

    def __init__(self, obj):
        self.obj = obj
        self.children = []

    @property
    def name(self) -> str:
        return self.obj.name

    # Body settings

    @property
    def mass(self) -> float:
        return self.obj.rigid_body.mass

    @mass.setter
    def mass(self, value: float) -> None:
        self.obj.rigid_body.mass = value

    @property
    def linear_damp(self) -> float:
        return self.obj.rigid_body.linear_damping

    @linear_damp.setter
    def linear_damp(self, value: float) -> None:
        self.obj.rigid_body.linear_damping = value

    @property
    def angular_damp(self) -> float:
        return self.obj.rigid_body.angular_damping

    @angular_damp.setter
    def angular_damp(self, value: float) -> None:
        self.obj.rigid_body.angular_damping = value

    @property
    def shapes(self) -> List:
        # A body without geometry has nothing to collide with
        data = getattr(self.obj, "data", None)
        if data is None or not len(getattr(data, "vertices", ())):
            return []
        collision_shape = self.obj.rigid_body.collision_shape
        if collision_shape == "CAPSULE":
            return [BlenderCapsule(self.obj)]
        return [BlenderShape(collision_shape)]

    # Joint

    @property
    def joint_type(self) -> JointType:
        rbc = getattr(self.obj, "rigid_body_constraint", None)
        if rbc is None or not rbc.enabled:
            return JointType.NONE
        return CONSTRAINT_TYPES.get(rbc.type, JointType.SIXDOF)

    @joint_type.setter
    def joint_type(self, value: JointType) -> None:
        rbc = getattr(self.obj, "rigid_body_constraint", None)
        if rbc is None:
            if value != JointType.NONE:
                print(f"Warning: '{self.name}' has no rigid body constraint, add one to set a {value.value} joint")
            return
        if value == JointType.NONE:
            rbc.enabled = False
            return
        rbc.enabled = True
        rbc.type = JOINT_CONSTRAINT_TYPES[value]

    def _prop(self, name: str, default: float) -> float:
        return float(self.obj.get(PROP_PREFIX + name, default))

    @property
    def joint_constraints(self):
        rbc = getattr(self.obj, "rigid_body_constraint", None)
        joint_type = self.joint_type
        if rbc is None:
            return None

        if joint_type == JointType.HINGE and rbc.use_limit_ang_z:
            return HingeConstraints(
                lower=math.degrees(rbc.limit_ang_z_lower),
                upper=math.degrees(rbc.limit_ang_z_upper),
                stiffness=self._prop("stiffness", HingeConstraints.stiffness),
                damping=self._prop("damping", HingeConstraints.damping),
            )
        if joint_type == JointType.CONE and rbc.use_limit_ang_x:
            return ConeConstraints(
                swing=math.degrees(rbc.limit_ang_x_upper),
                twist=math.degrees(rbc.limit_ang_z_upper),
                bias=self._prop("bias", ConeConstraints.bias),
                softness=self._prop("softness", ConeConstraints.softness),
                relaxation=self._prop("relaxation", ConeConstraints.relaxation),
            )
        if joint_type == JointType.PIN and PROP_PREFIX + "bias" in self.obj:
            return PinConstraints(
                bias=self._prop("bias", PinConstraints.bias),
                damping=self._prop("damping", PinConstraints.damping),
            )
        return None

    @joint_constraints.setter
    def joint_constraints(self, value) -> None:
        rbc = getattr(self.obj, "rigid_body_constraint", None)
        if rbc is None:
            return

        # Start from a clean slate so no stale limit survives a type change
        rbc.use_limit_ang_x = False
        rbc.use_limit_ang_y = False
        rbc.use_limit_ang_z = False
        for names in _CONSTRAINT_PROPS.values():
            for name in names:
                if PROP_PREFIX + name in self.obj:
                    del self.obj[PROP_PREFIX + name]

        if value is None:
            return

        if value.joint_type == JointType.HINGE:
            rbc.use_limit_ang_z = True
            rbc.limit_ang_z_lower = math.radians(value.lower)
            rbc.limit_ang_z_upper = math.radians(value.upper)
        elif value.joint_type == JointType.CONE:
            swing = math.radians(value.swing)
            twist = math.radians(value.twist)
            rbc.use_limit_ang_x = True
            rbc.limit_ang_x_lower = -swing
            rbc.limit_ang_x_upper = swing
            rbc.use_limit_ang_y = True
            rbc.limit_ang_y_lower = -swing
            rbc.limit_ang_y_upper = swing
            rbc.use_limit_ang_z = True
            rbc.limit_ang_z_lower = -twist
            rbc.limit_ang_z_upper = twist

        for name in _CONSTRAINT_PROPS[value.joint_type]:
            self.obj[PROP_PREFIX + name] = float(getattr(value, name))


# =============================================================================
# Hierarchy
# =============================================================================

class BlenderNode:
    """Any Blender object; a simulator when a direct child has a rigid body."""

    def __init__(self, obj):
        self.obj = obj

    @property
    def name(self) -> str:
        return self.obj.name

    @property
    def children(self) -> List:
        return [
            BlenderBone(child) if getattr(child, "rigid_body", None) is not None else BlenderNode(child)
            for child in self.obj.children
        ]

    @property
    def is_bone_simulator(self) -> bool:
        return any(getattr(child, "rigid_body", None) is not None for child in self.obj.children)


def active_selection(context=None) -> Optional[BlenderNode]:
    """Wrap the active object for RagdollSession calls, or None without one."""
    if context is None:
        if not BLENDER_AVAILABLE:
            return None
        context = bpy.context
    obj = context.active_object
    if obj is None:
        return None
    return BlenderNode(obj)
