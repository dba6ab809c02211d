"""
Ragdoll Doctor Session Module

The seam between an editor UI and the engines. A panel keeps one
RagdollSession, calls its methods from button handlers and shows `status`
and the returned values. Nothing here depends on a UI toolkit.

Every problem in the error taxonomy becomes status text; no method raises it.
The session assumes exclusive access to the hierarchy during each call.
"""

from typing import Dict, Iterator, List, Optional

from .classifier import build_bone_map
from .configure import configure_bones
from .errors import NoIssuesToResolve, RagdollDoctorError
from .fixes import BackupStore, apply_all, apply_fix, restore_bone
from .health import check_health
from .issues import Issue, IssueKind, detect_issues
from .report import summarize_issues
from .rig import find_duplicate_names, find_simulator
from .standard import load_standard


class RagdollSession:
    """State of one ragdoll-doctor panel: standard, last scan, and fix backups.

    A new scan replaces `issues` but keeps existing backups, so bones fixed
    before the rescan can still be restored.
    """

    def __init__(self, standard_overrides: Optional[Dict] = None):
        self.standard = load_standard(standard_overrides)
        self.backups = BackupStore()
        self.issues: List[Issue] = []
        self.root = None
        self.configured: List[str] = []
        self.status = ""

    # -------------------------------------------------------------------------
    # Detection
    # -------------------------------------------------------------------------

    def scan(self, selection) -> List[Issue]:
        """Detect issues in the hierarchy at or below `selection`."""
        try:
            root = find_simulator(selection)
        except RagdollDoctorError as e:
            self.status = str(e)
            return []

        self.root = root
        self.issues = detect_issues(root, self.standard)
        self.status = summarize_issues(self.issues)

        duplicates = find_duplicate_names(root)
        if duplicates:
            self.status += f" (duplicate bone names: {', '.join(duplicates)}; restore may pick the wrong bone)"
        return self.issues

    def health_check(self, selection) -> List[str]:
        try:
            root = find_simulator(selection)
        except RagdollDoctorError as e:
            self.status = str(e)
            return []

        problems = check_health(root, self.standard)
        self.status = f"Health check: {len(problems)} problem(s)" if problems else "Health check passed"
        return problems

    # -------------------------------------------------------------------------
    # Fix / Restore
    # -------------------------------------------------------------------------

    def quick_fix(self, issue: Issue) -> bool:
        if apply_fix(issue, self.backups, self.standard):
            self.status = f"Fixed {issue.kind.value} on {issue.bone_name}"
            return True
        self.status = f"{issue.bone_name} needs a manual fix"
        return False

    def _fixable_issues(self) -> List[Issue]:
        fixable = [issue for issue in self.issues if issue.fixable]
        if not fixable:
            raise NoIssuesToResolve("No issues to fix, run a scan first")
        return fixable

    def fix_all(self) -> int:
        """Apply every fixable issue from the last scan."""
        try:
            fixable = self._fixable_issues()
        except RagdollDoctorError as e:
            self.status = str(e)
            return 0

        count = apply_all(fixable, self.backups, self.standard)
        self.status = f"Applied {count} fix(es)"
        return count

    def restore(self, bone_name: str, kind: Optional[IssueKind] = None) -> bool:
        if restore_bone(bone_name, self.backups, kind=kind, root=self.root):
            self.status = f"Restored {bone_name}"
            return True
        if self.backups.is_fixed(bone_name, kind):
            self.status = f"{bone_name} was fixed in another rig, scan that rig to restore it"
            return False
        self.status = f"Nothing to restore for {bone_name}"
        return False

    def restore_all(self) -> int:
        count = 0
        for bone_name in self.backups.fixed_bone_names():
            if restore_bone(bone_name, self.backups, root=self.root):
                count += 1
        self.status = f"Restored {count} bone(s)"
        return count

    def is_fixed(self, bone_name: str, kind: Optional[IssueKind] = None) -> bool:
        return self.backups.is_fixed(bone_name, kind)

    # -------------------------------------------------------------------------
    # Bulk configuration
    # -------------------------------------------------------------------------

    def configure_steps(self, selection) -> Iterator[str]:
        """Configure the whole ragdoll, yielding once so the host can redraw.

        The single yield happens before any bone is touched. Once resumed,
        the configuration runs to completion.
        """
        self.configured = []
        try:
            root = find_simulator(selection)
        except RagdollDoctorError as e:
            self.status = str(e)
            return

        self.root = root
        bone_map = build_bone_map(root)
        self.status = f"Configuring {len(bone_map)} bone(s)..."
        yield self.status

        self.configured = configure_bones(bone_map, self.standard)
        self.status = f"Configured {len(self.configured)} bone(s)"

    def configure(self, selection) -> int:
        """Run `configure_steps` to completion. Returns the number of bones configured."""
        for _ in self.configure_steps(selection):
            pass
        return len(self.configured)
