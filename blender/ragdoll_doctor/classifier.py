"""
Ragdoll Doctor Bone Classifier Module

Resolves the anatomical role of a physical bone from its name. Rigs come from
many naming conventions (Rigify `DEF-forearm.L`, Mixamo `mixamorig:LeftForeArm`,
Godot humanoid `LeftLowerArm`, 3ds Max `Bip01 L Forearm`, snake_case presets
`lower_arm_l`), so names are normalized and matched against alias tables.

Matching is an ordered scan: roles are tried in ROLE_ORDER and aliases in the
order listed, and the first hit wins. A name matching aliases of several roles
always resolves to the earliest role in ROLE_ORDER.

Key functions:
- normalize_bone_name(): Lower-case a name and strip noise tokens and separators
- classify(): Role of a single bone name
- build_bone_map(): Role -> bone lookup for a whole hierarchy
"""

from typing import Dict, Iterable, List, Tuple

from .rig import iter_bones


UNCLASSIFIED = "unclassified"

# Tie-break order. Earlier roles win when a name matches several of them.
ROLE_ORDER = (
    "hips",
    "spine",
    "chest",
    "neck",
    "head",
    "upper_arm_l",
    "upper_arm_r",
    "forearm_l",
    "forearm_r",
    "hand_l",
    "hand_r",
    "thigh_l",
    "thigh_r",
    "shin_l",
    "shin_r",
    "foot_l",
    "foot_r",
)

# Aliases are written in their native convention and normalized at lookup.
# No bare "arm.l" style aliases: "forearm.l" contains them.
ROLE_PATTERNS = {
    "hips": ["hips", "pelvis"],
    "spine": ["spine", "abdomen"],
    "chest": ["chest", "upperchest", "ribcage", "thorax"],
    "neck": ["neck"],
    "head": ["head"],
    "upper_arm_l": ["upper_arm.l", "upperarm_l", "l_upperarm", "LeftUpperArm", "LeftArm", "uparm.l"],
    "upper_arm_r": ["upper_arm.r", "upperarm_r", "r_upperarm", "RightUpperArm", "RightArm", "uparm.r"],
    "forearm_l": ["forearm.l", "l_forearm", "LeftForeArm", "lower_arm.l", "l_lowerarm", "LeftLowerArm"],
    "forearm_r": ["forearm.r", "r_forearm", "RightForeArm", "lower_arm.r", "r_lowerarm", "RightLowerArm"],
    "hand_l": ["hand.l", "l_hand", "LeftHand"],
    "hand_r": ["hand.r", "r_hand", "RightHand"],
    "thigh_l": ["thigh.l", "l_thigh", "LeftThigh", "upper_leg.l", "l_upperleg", "LeftUpperLeg", "LeftUpLeg"],
    "thigh_r": ["thigh.r", "r_thigh", "RightThigh", "upper_leg.r", "r_upperleg", "RightUpperLeg", "RightUpLeg"],
    "shin_l": ["shin.l", "l_shin", "calf.l", "l_calf", "lower_leg.l", "l_lowerleg", "LeftLowerLeg", "LeftLeg", "LeftShin"],
    "shin_r": ["shin.r", "r_shin", "calf.r", "r_calf", "lower_leg.r", "r_lowerleg", "RightLowerLeg", "RightLeg", "RightShin"],
    "foot_l": ["foot.l", "l_foot", "LeftFoot"],
    "foot_r": ["foot.r", "r_foot", "RightFoot"],
}

# Editor and exporter prefixes that carry no anatomical meaning
NOISE_TOKENS = (
    "physical bone",
    "physicalbone",
    "mixamorig:",
    "mixamorig_",
    "def-",
    "org-",
    "mch-",
    "bip001",
    "bip01",
)

SEPARATORS = (".", "_", "-", ":", " ")

# Shortest key allowed to match by "alias contains key"
PERMISSIVE_MIN_KEY = 4


def _strip_separators(text: str) -> str:
    for sep in SEPARATORS:
        text = text.replace(sep, "")
    return text


def normalize_bone_name(raw_name: str) -> str:
    """Lower-case a bone name and drop noise tokens and separators.

    >>> normalize_bone_name("DEF-Forearm.L")
    'forearml'
    """
    key = str(raw_name).lower()
    for token in NOISE_TOKENS:
        key = key.replace(token, "")
    return _strip_separators(key)


def _normalized_patterns() -> List[Tuple[str, List[str]]]:
    return [
        (role, [_strip_separators(alias.lower()) for alias in ROLE_PATTERNS[role]])
        for role in ROLE_ORDER
    ]


_PATTERNS = _normalized_patterns()


def classify(raw_name: str, permissive: bool = False) -> str:
    """Return the anatomical role for a bone name, or UNCLASSIFIED.

    Args:
        raw_name: Bone name as it appears in the scene.
        permissive: Also accept an alias that contains the normalized name,
            which tolerates abbreviated names ("uparm" style). Keys shorter
            than PERMISSIVE_MIN_KEY never match this way.
    """
    key = normalize_bone_name(raw_name)
    if not key:
        return UNCLASSIFIED

    allow_reverse = permissive and len(key) >= PERMISSIVE_MIN_KEY
    for role, aliases in _PATTERNS:
        for alias in aliases:
            if alias in key or (allow_reverse and key in alias):
                return role
    return UNCLASSIFIED


def classify_bones(bones: Iterable, permissive: bool = False) -> List[Tuple[object, str]]:
    """Pair every bone with its role, in the given order."""
    return [(bone, classify(bone.name, permissive)) for bone in bones]


def find_role_conflicts(root) -> List[Tuple[str, str, str]]:
    """List bones that lose their role to an earlier bone.

    Returns:
        (role, kept_bone_name, skipped_bone_name) tuples in hierarchy order.
    """
    kept: Dict[str, str] = {}
    conflicts = []
    for bone, role in classify_bones(iter_bones(root), permissive=True):
        if role == UNCLASSIFIED:
            continue
        if role in kept:
            conflicts.append((role, kept[role], bone.name))
        else:
            kept[role] = bone.name
    return conflicts


def build_bone_map(root) -> Dict[str, object]:
    """Build the role -> bone lookup for a rigid-body hierarchy.

    The first bone (in child order) that resolves to a role keeps it. Bones
    resolving to an already-mapped role are skipped with a warning, and
    unclassified bones are left out.
    """
    bone_map: Dict[str, object] = {}
    for bone, role in classify_bones(iter_bones(root), permissive=True):
        if role == UNCLASSIFIED:
            continue
        if role in bone_map:
            print(f"Warning: '{bone.name}' also resolves to {role}, keeping '{bone_map[role].name}'")
            continue
        bone_map[role] = bone
    return bone_map
