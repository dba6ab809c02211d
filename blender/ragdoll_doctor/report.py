"""
Ragdoll Doctor Report Module

Turns scan results into the text an editor panel shows: one line per issue,
issues grouped into collision and joint sections, and a one-line summary.
Grouping is purely presentational; the detector's order is preserved inside
each group.
"""

from typing import Dict, List

from .issues import Issue, IssueKind
from .joints import JointType

COLLISION_GROUP = "collision"
JOINT_GROUP = "joint"

_GROUP_BY_KIND = {
    IssueKind.COLLISION_TOO_SMALL: COLLISION_GROUP,
    IssueKind.MISSING_COLLISION: COLLISION_GROUP,
    IssueKind.WRONG_JOINT_TYPE: JOINT_GROUP,
}


def _joint_label(joint_type) -> str:
    if isinstance(joint_type, JointType):
        return joint_type.name.capitalize() if joint_type != JointType.SIXDOF else "6DOF"
    return str(joint_type)


def describe_issue(issue: Issue) -> str:
    """One display line for an issue."""
    if issue.kind == IssueKind.COLLISION_TOO_SMALL:
        return (
            f"{issue.bone_name}: capsule radius {issue.observed:.3f} "
            f"(minimum {issue.recommended:.3f})"
        )
    if issue.kind == IssueKind.WRONG_JOINT_TYPE:
        return (
            f"{issue.bone_name} ({issue.role}): {_joint_label(issue.observed)} joint, "
            f"should be {_joint_label(issue.recommended)}"
        )
    return f"{issue.bone_name}: no collision shape"


def group_issues(issues: List[Issue]) -> Dict[str, List[Issue]]:
    """Split issues into collision and joint sections."""
    groups: Dict[str, List[Issue]] = {COLLISION_GROUP: [], JOINT_GROUP: []}
    for issue in issues:
        groups[_GROUP_BY_KIND[issue.kind]].append(issue)
    return groups


def summarize_issues(issues: List[Issue]) -> str:
    """One-line status for a finished scan."""
    if not issues:
        return "No issues found"
    groups = group_issues(issues)
    bones = len({issue.bone_name for issue in issues})
    return (
        f"Found {len(issues)} issue(s) on {bones} bone(s): "
        f"{len(groups[COLLISION_GROUP])} collision, {len(groups[JOINT_GROUP])} joint"
    )
