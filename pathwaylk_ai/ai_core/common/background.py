from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)


class BackgroundTaskRunner:
    """요청 수명과 분리된 백그라운드 작업 실행기 (캐시 write-through 등)."""

    def __init__(self, max_workers: int = 2, thread_name_prefix: str = "pathwaylk-bg") -> None:
        """
        @param max_workers 동시에 실행할 백그라운드 작업 수.
        @param thread_name_prefix 워커 스레드 이름 접두사.
        @returns None
        """
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Optional[Future]:
        """
        작업을 분리 실행합니다. 실패는 로그로만 남고 호출자에게 전파되지 않습니다.

        @param name 로그에 남길 작업 이름.
        @param func 실행할 함수.
        @returns 제출된 Future 또는 종료된 실행기면 None.
        """
        with self._lock:
            if self._closed:
                logger.warning("백그라운드 실행기가 종료되어 작업을 건너뜀", extra={"task": name})
                return None
            future = self._executor.submit(func, *args, **kwargs)
            self._pending.add(future)
        future.add_done_callback(lambda done: self._on_done(name, done))
        return future

    def drain(self, timeout: Optional[float] = None) -> bool:
        """
        @param timeout 최대 대기 시간(초).
        @returns 대기 중인 작업이 모두 끝났으면 True.
        """
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_pending: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait_for_pending, cancel_futures=not wait_for_pending)

    def _on_done(self, name: str, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            logger.warning("백그라운드 작업 취소됨", extra={"task": name})
            return
        error = future.exception()
        if error is not None:
            logger.error(
                "백그라운드 작업 실패",
                extra={"task": name, "error": str(error)},
                exc_info=(type(error), error, error.__traceback__),
            )
