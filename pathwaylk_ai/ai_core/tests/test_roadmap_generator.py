import unittest

from pathwaylk_ai.ai_core.client.gemini_response import GeminiResponse, create_empty_response, create_error_response
from pathwaylk_ai.ai_core.common.errors import GenerationError
from pathwaylk_ai.ai_core.service.career.job_role_service import JobRoleService
from pathwaylk_ai.ai_core.service.roadmap.roadmap_generator import RoadmapGenerator

PROGRAM = "Bachelor of Software Engineering Honours"


def roadmap_payload(**overrides):
    payload = {
        "program_name": "Software Engineering",
        "overview": "Prepare for the degree.",
        "total_duration": "6-8 months",
        "prerequisites": ["Advanced Certificate in Science"],
        "learning_steps": [
            {
                "step_number": 1,
                "title": " Programming Fundamentals ",
                "description": "Variables, loops and functions.",
                "topics": ["Python basics", " control flow ", ""],
                "duration": "3 weeks",
                "difficulty": "Beginner",
            },
            {
                "step_number": 2,
                "title": "Data Structures",
                "description": "Lists, stacks and queues.",
                "topics": ["arrays", "linked lists"],
                "duration": "4 weeks",
                "difficulty": "intermediate",
            },
        ],
        "key_skills": ["Problem solving"],
        "recommended_for": "A/L science students",
    }
    payload.update(overrides)
    return payload


class FakeLLMClient:
    def __init__(self, response: GeminiResponse, available: bool = True) -> None:
        """
        고정 응답을 돌려주는 테스트용 LLM 클라이언트를 초기화합니다.

        @param {GeminiResponse} response - generate_json이 반환할 응답.
        @param {bool} available - 사용 가능 여부.
        @returns {None} 호출 기록을 초기화합니다.
        """
        self.response = response
        self.available = available
        self.prompts = []

    @property
    def is_available(self) -> bool:
        return self.available

    def generate_json(self, prompt, config=None, system_instruction=None):
        self.prompts.append(prompt)
        return self.response


class RoadmapGeneratorTests(unittest.TestCase):
    def test_generates_validated_roadmap(self) -> None:
        client = FakeLLMClient(GeminiResponse(data=roadmap_payload(), raw_text="{...}"))

        roadmap = RoadmapGenerator(client).generate(PROGRAM, ["Advanced Certificate in Science"])

        self.assertEqual(roadmap.program_name, PROGRAM)
        self.assertEqual(len(roadmap.steps), 2)
        self.assertEqual(roadmap.steps[0].title, "Programming Fundamentals")
        self.assertEqual(roadmap.steps[0].topics, ["Python basics", "control flow"])
        self.assertEqual(roadmap.steps[0].difficulty, "beginner")
        self.assertTrue(all(step.videos == [] for step in roadmap.steps))
        self.assertIn("Advanced Certificate in Science", client.prompts[0])

    def test_prompt_without_prerequisites(self) -> None:
        client = FakeLLMClient(GeminiResponse(data=roadmap_payload(), raw_text="{...}"))
        RoadmapGenerator(client).generate(PROGRAM, [])
        self.assertIn("None specified", client.prompts[0])

    def test_unavailable_client(self) -> None:
        generator = RoadmapGenerator(FakeLLMClient(create_empty_response(), available=False))
        with self.assertRaises(GenerationError) as ctx:
            generator.generate(PROGRAM, [])
        self.assertEqual(ctx.exception.program, PROGRAM)
        self.assertEqual(ctx.exception.phase, "generate")

    def test_failed_call(self) -> None:
        generator = RoadmapGenerator(FakeLLMClient(create_error_response("503 unavailable")))
        with self.assertRaises(GenerationError) as ctx:
            generator.generate(PROGRAM, [])
        self.assertIn("503 unavailable", str(ctx.exception))

    def test_unparseable_output(self) -> None:
        generator = RoadmapGenerator(FakeLLMClient(GeminiResponse(data=None, raw_text="Sure! Here is")))
        with self.assertRaises(GenerationError):
            generator.generate(PROGRAM, [])

    def test_schema_mismatch(self) -> None:
        payload = roadmap_payload(learning_steps=[{"step_number": 1, "title": "Only title"}])
        generator = RoadmapGenerator(FakeLLMClient(GeminiResponse(data=payload, raw_text="{...}")))
        with self.assertRaises(GenerationError) as ctx:
            generator.generate(PROGRAM, [])
        self.assertIsNotNone(ctx.exception.__cause__)


def job_role_payload():
    return {
        "role_name": "software engineer",
        "overview": "Builds software.",
        "key_responsibilities": ["Write code", "Review code"],
        "required_skills": {"technical": ["Python"], "soft": ["Teamwork"], "tools": ["Git"]},
        "career_path": {"entry_level": "Associate", "mid_level": "Engineer", "senior_level": "Lead"},
        "salary_info": {"entry_level": "LKR 100,000", "currency": "LKR"},
        "growth_opportunities": ["Architecture"],
    }


class JobRoleServiceTests(unittest.TestCase):
    def test_details_with_defaults(self) -> None:
        client = FakeLLMClient(GeminiResponse(data=job_role_payload(), raw_text="{...}"))

        details = JobRoleService(client).get_job_role_details(" Software Engineer ", PROGRAM)

        self.assertEqual(details["role_name"], "Software Engineer")
        self.assertEqual(details["certifications"], [])
        self.assertEqual(details["local_market"], {})
        self.assertIn(PROGRAM, client.prompts[0])

    def test_empty_role_rejected(self) -> None:
        with self.assertRaises(ValueError):
            JobRoleService(FakeLLMClient(create_empty_response())).get_job_role_details(" ")

    def test_unavailable_client(self) -> None:
        service = JobRoleService(FakeLLMClient(create_empty_response(), available=False))
        with self.assertRaises(GenerationError) as ctx:
            service.get_job_role_details("Software Engineer")
        self.assertEqual(ctx.exception.phase, "job_role")

    def test_malformed_details(self) -> None:
        payload = job_role_payload()
        del payload["salary_info"]
        service = JobRoleService(FakeLLMClient(GeminiResponse(data=payload, raw_text="{...}")))
        with self.assertRaises(GenerationError):
            service.get_job_role_details("Software Engineer")


if __name__ == "__main__":
    unittest.main()
