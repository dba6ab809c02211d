"""
Ragdoll Doctor Fix/Restore Module

Applies the corrective values for a single Issue and reverses them later.
Before the first fix of a kind touches a bone, its previous values are saved
in a BackupStore owned by the caller; restoring writes those values back and
forgets the backup.

Backups are keyed by bone name and issue kind, so bone names must be unique
within one hierarchy for restore to find the right bone. Restoring under a
root only writes to the bone that was fixed, never to a same-named bone of
another rig. A bone can be fixed for collision size and joint type
independently. Fixing the same kind again keeps the original snapshot, so
repeated fixes are idempotent and restore always returns to the state before
the first fix.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .issues import Issue, IssueKind
from .joints import JointConstraints, JointType, set_joint
from .rig import find_bone, is_capsule, iter_bones
from .standard import constraints_for, load_standard


@dataclass
class FixBackup:
    """Values a bone had before a fix of one kind was applied."""
    bone_name: str
    kind: IssueKind
    bone: Any
    role: str = ""
    joint_type: Optional[JointType] = None
    joint_constraints: Optional[JointConstraints] = None
    # shape index -> (radius, height)
    capsules: Dict[int, Tuple[float, float]] = field(default_factory=dict)


class BackupStore:
    """Session-scoped table of fix backups.

    Nothing is ever collected automatically: backups for bones that were
    deleted stay until `discard_missing()` or `clear()` is called.
    """

    def __init__(self):
        self._backups: Dict[str, Dict[IssueKind, FixBackup]] = {}

    def __len__(self) -> int:
        return sum(len(kinds) for kinds in self._backups.values())

    def __contains__(self, bone_name: str) -> bool:
        return bone_name in self._backups

    def get(self, bone_name: str, kind: IssueKind) -> Optional[FixBackup]:
        return self._backups.get(bone_name, {}).get(kind)

    def record(self, backup: FixBackup) -> FixBackup:
        self._backups.setdefault(backup.bone_name, {})[backup.kind] = backup
        return backup

    def pop(self, bone_name: str, kind: IssueKind) -> Optional[FixBackup]:
        kinds = self._backups.get(bone_name)
        if not kinds:
            return None
        backup = kinds.pop(kind, None)
        if not kinds:
            del self._backups[bone_name]
        return backup

    def kinds(self, bone_name: str) -> List[IssueKind]:
        """Kinds backed up for a bone, oldest fix first."""
        return list(self._backups.get(bone_name, {}))

    def is_fixed(self, bone_name: str, kind: Optional[IssueKind] = None) -> bool:
        if kind is None:
            return bone_name in self._backups
        return self.get(bone_name, kind) is not None

    def fixed_bone_names(self) -> List[str]:
        return list(self._backups)

    def clear(self) -> None:
        self._backups.clear()

    def discard_missing(self, root) -> List[str]:
        """Forget backups for bones no longer present under `root`."""
        present = {bone.name for bone in iter_bones(root)}
        missing = [name for name in self._backups if name not in present]
        for name in missing:
            del self._backups[name]
        return missing


# =============================================================================
# Fixing
# =============================================================================

def fixed_capsule_height(old_radius: float, old_height: float, min_radius: float) -> float:
    """Height that keeps a capsule's aspect ratio once its radius becomes `min_radius`.

    Never less than two radii, so the capsule cannot collapse into a sphere.
    """
    if old_radius <= 0.0:
        return max(old_height, 2.0 * min_radius)
    return max(old_height * (min_radius / old_radius), 2.0 * min_radius)


def _fix_collision(issue: Issue, store: BackupStore, standard: Dict) -> bool:
    bone = issue.bone
    shapes = list(getattr(bone, "shapes", ()))
    index = issue.shape_index
    if index is None or index >= len(shapes) or not is_capsule(shapes[index]):
        print(f"Warning: capsule {index} on '{issue.bone_name}' no longer exists, skipping fix")
        return False

    shape = shapes[index]
    backup = store.get(issue.bone_name, issue.kind)
    if backup is None:
        backup = store.record(FixBackup(issue.bone_name, issue.kind, bone, role=issue.role))
    if index not in backup.capsules:
        backup.capsules[index] = (shape.radius, shape.height)

    min_radius = standard["collision_min_radius"]
    new_height = fixed_capsule_height(shape.radius, shape.height, min_radius)
    shape.radius = min_radius
    shape.height = new_height
    return True


def _fix_joint(issue: Issue, store: BackupStore, standard: Dict) -> bool:
    bone = issue.bone
    previous_constraints = bone.joint_constraints
    recorded = False
    if store.get(issue.bone_name, issue.kind) is None:
        store.record(FixBackup(
            issue.bone_name,
            issue.kind,
            bone,
            role=issue.role,
            joint_type=bone.joint_type,
            joint_constraints=bone.joint_constraints,
        ))
        recorded = True

    joint_type = issue.recommended
    set_joint(bone, joint_type, constraints_for(issue.role, joint_type, standard))

    # Hosts may refuse the write (a Blender body without a constraint)
    if bone.joint_type != joint_type:
        bone.joint_constraints = previous_constraints
        if recorded:
            store.pop(issue.bone_name, issue.kind)
        print(f"Warning: could not set a {joint_type.value} joint on '{issue.bone_name}', skipping fix")
        return False
    return True


def apply_fix(issue: Issue, store: BackupStore, standard: Optional[Dict] = None) -> bool:
    """Apply the standard's corrective values for one issue.

    Args:
        issue: Issue from `detect_issues()`.
        store: Backup table of the calling session.
        standard: Standard from `load_standard()`; defaults to the built-in one.

    Returns:
        True if the bone was changed, False for issues that need a manual fix.
    """
    if standard is None:
        standard = load_standard()

    if issue.kind == IssueKind.COLLISION_TOO_SMALL:
        return _fix_collision(issue, store, standard)
    if issue.kind == IssueKind.WRONG_JOINT_TYPE:
        return _fix_joint(issue, store, standard)

    print(f"Warning: {issue.kind.value} on '{issue.bone_name}' has no automatic fix")
    return False


def apply_all(issues: Iterable[Issue], store: BackupStore, standard: Optional[Dict] = None) -> int:
    """Apply every fixable issue. Returns the number of fixes applied."""
    if standard is None:
        standard = load_standard()
    return sum(1 for issue in issues if issue.fixable and apply_fix(issue, store, standard))


# =============================================================================
# Restoring
# =============================================================================

def same_bone(a, b) -> bool:
    """True if two host bones are the same bone (wrappers compare their object)."""
    if a is b:
        return True
    obj = getattr(a, "obj", None)
    return obj is not None and obj is getattr(b, "obj", None)


def _write_backup(bone, backup: FixBackup) -> None:
    if backup.kind == IssueKind.WRONG_JOINT_TYPE:
        # Written raw: the pre-fix pair may not be a valid combination
        bone.joint_type = backup.joint_type
        bone.joint_constraints = backup.joint_constraints
        return

    shapes = list(getattr(bone, "shapes", ()))
    for index, (radius, height) in backup.capsules.items():
        if index < len(shapes) and is_capsule(shapes[index]):
            shapes[index].radius = radius
            shapes[index].height = height
        else:
            print(f"Warning: capsule {index} on '{backup.bone_name}' is gone, not restored")


def restore_bone(
    bone_name: str,
    store: BackupStore,
    kind: Optional[IssueKind] = None,
    root=None,
) -> bool:
    """Write back the pre-fix values of a bone and delete its backups.

    Args:
        bone_name: Name the bone had when it was fixed.
        store: Backup table of the calling session.
        kind: Only restore this kind; all kinds (newest first) when None.
        root: When given, the bone is looked up by name under it. A backup
            whose bone has vanished is dropped without touching anything.
            A same-named bone that is not the fixed one (another rig) is
            left alone and the backup is kept.

    Returns:
        True if any value was written back.
    """
    kinds = [kind] if kind is not None else list(reversed(store.kinds(bone_name)))
    restored = False
    for backup_kind in kinds:
        backup = store.get(bone_name, backup_kind)
        if backup is None:
            continue

        bone = backup.bone
        if root is not None:
            found = find_bone(root, bone_name)
            if found is None:
                print(f"Warning: bone '{bone_name}' no longer exists, dropping its backup")
                store.pop(bone_name, backup_kind)
                continue
            if not same_bone(found, bone):
                print(f"Warning: '{bone_name}' under '{root.name}' is not the fixed bone, keeping its backup")
                continue
            bone = found

        store.pop(bone_name, backup_kind)
        _write_backup(bone, backup)
        restored = True
    return restored
