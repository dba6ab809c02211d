import unittest
from pathlib import Path
import sys


# Allow `import ragdoll_doctor.*` from repo root.
_BLENDER_DIR = Path(__file__).resolve().parents[2]
if str(_BLENDER_DIR) not in sys.path:
    sys.path.insert(0, str(_BLENDER_DIR))


def _capsule(radius=0.05, height=0.3):
    from ragdoll_doctor.rig import CapsuleShape

    return CapsuleShape(radius=radius, height=height)


class TestDetectIssues(unittest.TestCase):
    def test_forearm_with_pin_joint_needs_hinge(self) -> None:
        from ragdoll_doctor.issues import IssueKind, detect_issues
        from ragdoll_doctor.joints import JointType
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone

        bone = PhysicalBone("DEF-Forearm.L", joint_type=JointType.PIN, shapes=[_capsule()])
        issues = detect_issues(BoneSimulator(children=[bone]))

        self.assertEqual(len(issues), 1)
        issue = issues[0]
        self.assertEqual(issue.kind, IssueKind.WRONG_JOINT_TYPE)
        self.assertIs(issue.bone, bone)
        self.assertEqual(issue.role, "forearm_l")
        self.assertEqual(issue.observed, JointType.PIN)
        self.assertEqual(issue.recommended, JointType.HINGE)
        self.assertTrue(issue.fixable)

    def test_small_capsule_reports_observed_and_recommended_radius(self) -> None:
        from ragdoll_doctor.issues import IssueKind, detect_issues
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone

        bone = PhysicalBone("Weapon", shapes=[_capsule(0.008, 0.05)])
        issues = detect_issues(BoneSimulator(children=[bone]))

        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].kind, IssueKind.COLLISION_TOO_SMALL)
        self.assertEqual(issues[0].observed, 0.008)
        self.assertEqual(issues[0].recommended, 0.02)
        self.assertEqual(issues[0].shape_index, 0)
        self.assertEqual(issues[0].role, "unclassified")

    def test_one_issue_per_small_capsule(self) -> None:
        from ragdoll_doctor.issues import detect_issues
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone, SphereShape

        bone = PhysicalBone("Tail", shapes=[
            _capsule(0.01),
            _capsule(0.05),
            SphereShape(radius=0.001),
            _capsule(0.019),
        ])
        issues = detect_issues(BoneSimulator(children=[bone]))

        self.assertEqual([issue.shape_index for issue in issues], [0, 3])

    def test_radius_at_minimum_is_not_flagged(self) -> None:
        from ragdoll_doctor.issues import detect_issues
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone

        bone = PhysicalBone("Tail", shapes=[_capsule(0.02)])
        self.assertEqual(detect_issues(BoneSimulator(children=[bone])), [])

    def test_bone_without_shapes_reports_missing_collision(self) -> None:
        from ragdoll_doctor.issues import IssueKind, detect_issues
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone

        issues = detect_issues(BoneSimulator(children=[PhysicalBone("Tail")]))

        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].kind, IssueKind.MISSING_COLLISION)
        self.assertFalse(issues[0].fixable)

    def test_upper_limbs_need_cone_joints(self) -> None:
        from ragdoll_doctor.issues import detect_issues
        from ragdoll_doctor.joints import JointType
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone

        root = BoneSimulator(children=[
            PhysicalBone("upper_arm.R", joint_type=JointType.HINGE, shapes=[_capsule()]),
            PhysicalBone("thigh.L", joint_type=JointType.CONE, shapes=[_capsule()]),
        ])
        issues = detect_issues(root)

        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].bone_name, "upper_arm.R")
        self.assertEqual(issues[0].recommended, JointType.CONE)

    def test_torso_and_unclassified_joints_are_not_checked(self) -> None:
        from ragdoll_doctor.issues import detect_issues
        from ragdoll_doctor.joints import JointType
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone

        root = BoneSimulator(children=[
            PhysicalBone("Spine", joint_type=JointType.PIN, shapes=[_capsule()]),
            PhysicalBone("Hips", joint_type=JointType.NONE, shapes=[_capsule()]),
            PhysicalBone("Weapon", joint_type=JointType.SLIDER, shapes=[_capsule()]),
        ])
        self.assertEqual(detect_issues(root), [])

    def test_issues_follow_child_order_and_check_order(self) -> None:
        from ragdoll_doctor.issues import IssueKind, detect_issues
        from ragdoll_doctor.joints import JointType
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone, SceneNode

        root = BoneSimulator(children=[
            PhysicalBone("shin.R", joint_type=JointType.CONE, shapes=[_capsule(0.01)]),
            SceneNode("Marker"),
            PhysicalBone("forearm.L"),
        ])
        issues = detect_issues(root)

        self.assertEqual(
            [(issue.bone_name, issue.kind) for issue in issues],
            [
                ("shin.R", IssueKind.COLLISION_TOO_SMALL),
                ("shin.R", IssueKind.WRONG_JOINT_TYPE),
                ("forearm.L", IssueKind.MISSING_COLLISION),
                ("forearm.L", IssueKind.WRONG_JOINT_TYPE),
            ],
        )

    def test_scan_does_not_modify_bones(self) -> None:
        from ragdoll_doctor.issues import detect_issues
        from ragdoll_doctor.joints import JointType
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone

        bone = PhysicalBone("DEF-Forearm.L", joint_type=JointType.PIN, shapes=[_capsule(0.008, 0.05)])
        detect_issues(BoneSimulator(children=[bone]))

        self.assertEqual(bone.joint_type, JointType.PIN)
        self.assertEqual(bone.shapes[0].radius, 0.008)
        self.assertEqual(bone.shapes[0].height, 0.05)

    def test_custom_standard_changes_minimum_radius(self) -> None:
        from ragdoll_doctor.issues import detect_issues
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone
        from ragdoll_doctor.standard import load_standard

        root = BoneSimulator(children=[PhysicalBone("Tail", shapes=[_capsule(0.03)])])
        standard = load_standard({"collision_min_radius": 0.05})

        issues = detect_issues(root, standard)
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].recommended, 0.05)


if __name__ == "__main__":
    unittest.main()
