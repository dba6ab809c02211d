import unittest
from pathlib import Path
import sys


# Allow `import ragdoll_doctor.*` from repo root.
_BLENDER_DIR = Path(__file__).resolve().parents[2]
if str(_BLENDER_DIR) not in sys.path:
    sys.path.insert(0, str(_BLENDER_DIR))


class TestNormalizeBoneName(unittest.TestCase):
    def test_strips_editor_prefix_and_separators(self) -> None:
        from ragdoll_doctor.classifier import normalize_bone_name

        self.assertEqual(normalize_bone_name("DEF-Forearm.L"), "forearml")
        self.assertEqual(normalize_bone_name("Physical Bone Left Hand"), "lefthand")
        self.assertEqual(normalize_bone_name("mixamorig:LeftForeArm"), "leftforearm")
        self.assertEqual(normalize_bone_name("Bip01 R Calf"), "rcalf")


class TestClassify(unittest.TestCase):
    def test_rigify_names(self) -> None:
        from ragdoll_doctor.classifier import classify

        self.assertEqual(classify("DEF-Forearm.L"), "forearm_l")
        self.assertEqual(classify("DEF-forearm.R"), "forearm_r")
        self.assertEqual(classify("DEF-upper_arm.L.001"), "upper_arm_l")
        self.assertEqual(classify("DEF-thigh.L"), "thigh_l")
        self.assertEqual(classify("DEF-shin.L"), "shin_l")
        self.assertEqual(classify("DEF-hand.R"), "hand_r")
        self.assertEqual(classify("DEF-foot.L"), "foot_l")

    def test_mixamo_names(self) -> None:
        from ragdoll_doctor.classifier import classify

        self.assertEqual(classify("mixamorig:Hips"), "hips")
        self.assertEqual(classify("mixamorig:LeftArm"), "upper_arm_l")
        self.assertEqual(classify("mixamorig:LeftForeArm"), "forearm_l")
        self.assertEqual(classify("mixamorig:RightUpLeg"), "thigh_r")
        self.assertEqual(classify("mixamorig:RightLeg"), "shin_r")

    def test_godot_and_max_names(self) -> None:
        from ragdoll_doctor.classifier import classify

        self.assertEqual(classify("Physical Bone LeftLowerArm"), "forearm_l")
        self.assertEqual(classify("Physical Bone LeftUpperLeg"), "thigh_l")
        self.assertEqual(classify("UpperChest"), "chest")
        self.assertEqual(classify("Bip01 R Calf"), "shin_r")
        self.assertEqual(classify("Bip01 L UpperArm"), "upper_arm_l")

    def test_skeleton_preset_names(self) -> None:
        from ragdoll_doctor.classifier import classify

        self.assertEqual(classify("upper_arm_l"), "upper_arm_l")
        self.assertEqual(classify("lower_arm_l"), "forearm_l")
        self.assertEqual(classify("upper_leg_r"), "thigh_r")
        self.assertEqual(classify("lower_leg_r"), "shin_r")
        self.assertEqual(classify("shoulder_l"), "unclassified")

    def test_unknown_and_empty_names_are_unclassified(self) -> None:
        from ragdoll_doctor.classifier import UNCLASSIFIED, classify

        self.assertEqual(classify("Weapon"), UNCLASSIFIED)
        self.assertEqual(classify(""), UNCLASSIFIED)
        self.assertEqual(classify("DEF-"), UNCLASSIFIED)

    def test_ambiguous_name_resolves_to_earliest_role(self) -> None:
        from ragdoll_doctor.classifier import classify

        # "spine" is declared before "chest" and "neck" before "head"
        self.assertEqual(classify("Spine2"), "spine")
        self.assertEqual(classify("neck_head"), "neck")

    def test_classify_is_deterministic(self) -> None:
        from ragdoll_doctor.classifier import classify

        names = ["DEF-Forearm.L", "mixamorig:RightLeg", "Weapon", "UpperArm"]
        first = [classify(name, permissive=True) for name in names]
        second = [classify(name, permissive=True) for name in names]
        self.assertEqual(first, second)

    def test_permissive_accepts_abbreviated_names(self) -> None:
        from ragdoll_doctor.classifier import classify

        self.assertEqual(classify("UpperArm"), "unclassified")
        self.assertEqual(classify("UpperArm", permissive=True), "upper_arm_l")

    def test_permissive_ignores_very_short_keys(self) -> None:
        from ragdoll_doctor.classifier import classify

        self.assertEqual(classify("Arm", permissive=True), "unclassified")


class TestBuildBoneMap(unittest.TestCase):
    def _rig(self):
        from ragdoll_doctor.rig import BoneSimulator, PhysicalBone, SceneNode

        return BoneSimulator(children=[
            PhysicalBone("Hips"),
            PhysicalBone("Spine"),
            PhysicalBone("Spine1"),
            SceneNode("Forearm.L"),
            PhysicalBone("DEF-forearm.L"),
            PhysicalBone("Weapon"),
        ])

    def test_first_bone_wins_each_role(self) -> None:
        from ragdoll_doctor.classifier import build_bone_map

        root = self._rig()
        bone_map = build_bone_map(root)

        self.assertEqual(list(bone_map), ["hips", "spine", "forearm_l"])
        self.assertIs(bone_map["spine"], root.children[1])
        self.assertIs(bone_map["forearm_l"], root.children[4])

    def test_role_conflicts_are_reported(self) -> None:
        from ragdoll_doctor.classifier import find_role_conflicts

        self.assertEqual(find_role_conflicts(self._rig()), [("spine", "Spine", "Spine1")])

    def test_empty_hierarchy_gives_empty_map(self) -> None:
        from ragdoll_doctor.classifier import build_bone_map
        from ragdoll_doctor.rig import BoneSimulator

        self.assertEqual(build_bone_map(BoneSimulator()), {})


if __name__ == "__main__":
    unittest.main()
