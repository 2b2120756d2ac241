import unittest
from datetime import datetime, timezone

from pathwaylk_ai.ai_core.common.errors import CacheStoreError, GenerationError, GraphStoreError, PathwayError
from pathwaylk_ai.ai_core.domain import LearningRoadmap, LearningStep, ProgramTier, Video, classify_tier


class ProgramTierTests(unittest.TestCase):
    def test_name_heuristic(self) -> None:
        cases = {
            "ICT Technician (NVQ Level 3)": ProgramTier.NVQ_LEVEL_3,
            "Computer Hardware Technician (NVQ Level 4)": ProgramTier.NVQ_LEVEL_4,
            "Advanced Certificate in Science": ProgramTier.ADVANCED_CERTIFICATE,
            "Certificate in English": ProgramTier.CERTIFICATE,
            "Bachelor of Software Engineering Honours": ProgramTier.BACHELOR,
            "BSc Honours in Engineering - Computer Engineering": ProgramTier.BSC,
            "Civil Engineering Degree Programme": ProgramTier.OTHER,
        }
        for name, tier in cases.items():
            with self.subTest(name=name):
                self.assertEqual(classify_tier(name), tier)

    def test_explicit_tier_wins(self) -> None:
        self.assertEqual(classify_tier("Bachelor of Arts", "certificate"), ProgramTier.CERTIFICATE)
        self.assertEqual(classify_tier("Bachelor of Arts", 1), ProgramTier.NVQ_LEVEL_3)
        self.assertEqual(classify_tier("Bachelor of Arts", "unknown"), ProgramTier.BACHELOR)

    def test_tier_order(self) -> None:
        self.assertLess(ProgramTier.ADVANCED_CERTIFICATE, ProgramTier.BACHELOR)
        self.assertLess(ProgramTier.BSC, ProgramTier.OTHER)


class LearningRoadmapTests(unittest.TestCase):
    def test_dict_round_trip_keeps_videos(self) -> None:
        video = Video(
            video_id="abc",
            title="Python tutorial",
            url="https://www.youtube.com/watch?v=abc",
            view_count=2000,
            published_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )
        roadmap = LearningRoadmap(
            program_name="Bachelor of Software Engineering Honours",
            steps=[LearningStep(step_number=1, title="Basics", topics=["Python"], videos=[video])],
        )

        restored = LearningRoadmap.from_dict(roadmap.to_dict())

        self.assertEqual(restored, roadmap)
        self.assertEqual(restored.total_videos, 1)

    def test_without_videos_does_not_mutate_original(self) -> None:
        step = LearningStep(step_number=1, title="Basics", videos=[Video(video_id="a", title="t", url="u")])
        roadmap = LearningRoadmap(program_name="P", steps=[step])

        stripped = roadmap.without_videos()

        self.assertEqual(stripped.total_videos, 0)
        self.assertEqual(roadmap.total_videos, 1)


class ErrorTests(unittest.TestCase):
    def test_infrastructure_errors_are_retryable(self) -> None:
        self.assertTrue(GraphStoreError("x").retryable)
        self.assertTrue(CacheStoreError("x").retryable)
        self.assertFalse(GenerationError("x").retryable)
        self.assertTrue(issubclass(GenerationError, PathwayError))

    def test_message_includes_context(self) -> None:
        error = GenerationError("model timeout", program="Civil Engineering Degree Programme", phase="generate")
        self.assertEqual(str(error), "model timeout (program=Civil Engineering Degree Programme, phase=generate)")


if __name__ == "__main__":
    unittest.main()
