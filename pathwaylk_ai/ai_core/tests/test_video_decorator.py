import threading
import time
import unittest

from pathwaylk_ai.ai_core.domain.learning_roadmap import LearningRoadmap
from pathwaylk_ai.ai_core.domain.learning_step import LearningStep
from pathwaylk_ai.ai_core.domain.video import Video
from pathwaylk_ai.ai_core.service.roadmap.video_decorator import VideoDecorator, bounded_topics


def make_video(topic: str) -> Video:
    slug = topic.lower().replace(" ", "-")
    return Video(video_id=slug, title=f"{topic} tutorial", url=f"https://www.youtube.com/watch?v={slug}")


class FakeFinder:
    def __init__(self, failing=(), slow=(), delay: float = 0.0) -> None:
        """
        주제별로 실패/지연을 흉내 내는 테스트용 영상 검색기를 초기화합니다.

        @param {tuple} failing - 예외를 던질 주제.
        @param {tuple} slow - delay만큼 늦게 응답할 주제.
        @param {float} delay - 지연 시간(초).
        @returns {None} 호출 기록을 초기화합니다.
        """
        self.failing = set(failing)
        self.slow = set(slow)
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def search(self, topic: str, max_results: int = 1):
        with self._lock:
            self.calls.append(topic)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if topic in self.slow:
                time.sleep(self.delay)
            if topic in self.failing:
                raise ConnectionError(f"search failed for {topic}")
            return [make_video(topic)]
        finally:
            with self._lock:
                self.active -= 1


def make_roadmap(step_count: int, topics_per_step: int = 3) -> LearningRoadmap:
    steps = [
        LearningStep(
            step_number=index + 1,
            title=f"Step {index + 1}",
            topics=[f"topic {index + 1}-{topic + 1}" for topic in range(topics_per_step)],
        )
        for index in range(step_count)
    ]
    return LearningRoadmap(program_name="Bachelor of Software Engineering Honours", steps=steps)


class FetchVideosForTopicsTests(unittest.TestCase):
    def test_one_result_per_topic(self) -> None:
        decorator = VideoDecorator(FakeFinder())
        videos = decorator.fetch_videos_for_topics(["Python", "Git", "SQL"])
        self.assertEqual([video.video_id for video in videos], ["python", "git", "sql"])

    def test_caps_topics_at_three(self) -> None:
        finder = FakeFinder()
        videos = VideoDecorator(finder).fetch_videos_for_topics(["a", "b", "c", "d", "e"])

        self.assertEqual(len(videos), 3)
        self.assertEqual(sorted(finder.calls), ["a", "b", "c"])

    def test_failed_topic_contributes_nothing(self) -> None:
        decorator = VideoDecorator(FakeFinder(failing=["Git"]))
        with self.assertLogs("pathwaylk_ai.ai_core.service.roadmap.video_decorator", level="WARNING"):
            videos = decorator.fetch_videos_for_topics(["Python", "Git", "SQL"])
        self.assertEqual([video.video_id for video in videos], ["python", "sql"])

    def test_slow_topic_times_out(self) -> None:
        decorator = VideoDecorator(FakeFinder(slow=["Git"], delay=1.0), topic_timeout=0.2)

        started = time.monotonic()
        videos = decorator.fetch_videos_for_topics(["Python", "Git"])

        self.assertLess(time.monotonic() - started, 0.9)
        self.assertEqual([video.video_id for video in videos], ["python"])

    def test_queued_topics_get_their_own_timeout(self) -> None:
        """
        동시 검색 수가 1이면 주제가 차례로 실행되지만, 각 주제는 자기 시작 시각부터 제한 시간을 가집니다.

        @returns {None} 테스트만 수행합니다.
        """
        finder = FakeFinder(slow=["a", "b", "c"], delay=0.2)
        decorator = VideoDecorator(finder, max_topics=4, topic_concurrency=1, topic_timeout=0.3)

        videos = decorator.fetch_videos_for_topics(["a", "b", "c"])

        self.assertEqual([video.video_id for video in videos], ["a", "b", "c"])
        self.assertEqual(finder.max_active, 1)

    def test_queued_topic_behind_hung_search_is_skipped(self) -> None:
        decorator = VideoDecorator(FakeFinder(slow=["Git"], delay=1.0), topic_concurrency=1, topic_timeout=0.2)

        started = time.monotonic()
        with self.assertLogs("pathwaylk_ai.ai_core.service.roadmap.video_decorator", level="WARNING"):
            videos = decorator.fetch_videos_for_topics(["Git", "Python"])

        self.assertLess(time.monotonic() - started, 0.9)
        self.assertEqual(videos, [])

    def test_never_raises_when_every_topic_fails(self) -> None:
        decorator = VideoDecorator(FakeFinder(failing=["a", "b"]))
        self.assertEqual(decorator.fetch_videos_for_topics(["a", "b"]), [])

    def test_blank_topics_are_ignored(self) -> None:
        finder = FakeFinder()
        self.assertEqual(VideoDecorator(finder).fetch_videos_for_topics(["", "  "]), [])
        self.assertEqual(finder.calls, [])

    def test_duplicate_videos_are_dropped(self) -> None:
        videos = VideoDecorator(FakeFinder()).fetch_videos_for_topics(["Python", "python"])
        self.assertEqual(len(videos), 1)

    def test_invalid_limits(self) -> None:
        with self.assertRaises(ValueError):
            VideoDecorator(FakeFinder(), max_topics=0)
        with self.assertRaises(ValueError):
            VideoDecorator(FakeFinder(), deadline=0)

    def test_bounded_topics(self) -> None:
        self.assertEqual(bounded_topics([" a ", "", "b", "c", "d"]), ["a", "b", "c"])
        self.assertEqual(bounded_topics(["a", "b"], limit=1), ["a"])


class DecorateTests(unittest.TestCase):
    def test_every_step_gets_videos(self) -> None:
        roadmap = make_roadmap(5)
        decorated = VideoDecorator(FakeFinder()).decorate(roadmap)

        self.assertEqual([len(step.videos) for step in decorated.steps], [3, 3, 3, 3, 3])
        self.assertEqual(roadmap.total_videos, 0)

    def test_one_failed_topic_in_one_step(self) -> None:
        """
        5단계 로드맵에서 한 주제만 실패하면 해당 단계만 영상이 하나 줄어듭니다.

        @returns {None} 테스트만 수행합니다.
        """
        decorated = VideoDecorator(FakeFinder(failing=["topic 3-2"])).decorate(make_roadmap(5))

        self.assertEqual([len(step.videos) for step in decorated.steps], [3, 3, 2, 3, 3])
        self.assertEqual(decorated.total_videos, 14)
        self.assertEqual([step.step_number for step in decorated.steps], [1, 2, 3, 4, 5])

    def test_step_concurrency_is_bounded(self) -> None:
        finder = FakeFinder(slow=[f"topic {index}-1" for index in range(1, 7)], delay=0.05)
        VideoDecorator(finder, step_concurrency=3, max_topics=1).decorate(make_roadmap(6, topics_per_step=1))
        self.assertLessEqual(finder.max_active, 3)

    def test_deadline_leaves_unfinished_steps_empty(self) -> None:
        finder = FakeFinder(slow=["topic 2-1"], delay=1.0)
        decorator = VideoDecorator(finder, topic_timeout=5.0, deadline=0.3)

        started = time.monotonic()
        decorated = decorator.decorate(make_roadmap(2, topics_per_step=1))
        elapsed = time.monotonic() - started

        self.assertLess(elapsed, 0.9)
        self.assertEqual(len(decorated.steps[0].videos), 1)
        self.assertEqual(decorated.steps[1].videos, [])

        time.sleep(1.0)
        self.assertEqual(decorated.steps[1].videos, [])

    def test_empty_roadmap(self) -> None:
        roadmap = LearningRoadmap(program_name="Empty")
        self.assertIs(VideoDecorator(FakeFinder()).decorate(roadmap), roadmap)


if __name__ == "__main__":
    unittest.main()
