"""
=============================================================================
WORKER POOL
=============================================================================

Runs accepted connections concurrently, one connection per task.

    accept thread                         workers
    ─────────────                         ───────
    submit(conn) ──► ┌───────────────┐ ──► Worker-0  parse → dispatch → send → close
                     │ bounded Queue │ ──► Worker-1  ...
                     │  (queue_size) │ ──► Worker-2
                     └───────────────┘      ...
                            │
                            └── full? submit() returns False, the caller
                                answers 503 instead of blocking accept()

Sizing:
    - min_workers threads start with the pool and live until shutdown
    - when more work is queued than there are idle workers, one more
      thread is added, up to max_workers
    - past max_workers, an overflow worker is started instead: it runs a
      single task and exits, so a connection that never sends anything
      cannot hold up the ones behind it
    - shutdown puts one None per worker on the queue; a worker that takes
      a None exits

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call: ``func(*args, **kwargs)``."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Pulls tasks off the shared queue until it gets None or is told to stop.

    A task that raises is logged and counted; the worker carries on with
    the next one. A ``single_task`` worker stops after its first task, or
    after idle_timeout with nothing to do.
    """

    def __init__(
        self,
        task_queue: queue.Queue,
        worker_id: int,
        idle_timeout: float = 60.0,
        single_task: bool = False
    ):
        prefix = "Overflow" if single_task else "Worker"
        super().__init__(name=f"{prefix}-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout
        self.single_task = single_task

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                if self.single_task:
                    break
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

            if self.single_task:
                break

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s "
                f"(queued {start_time - task.submitted_at:.3f}s)"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        self._shutdown.set()


class ThreadPool:
    """
    Bounded pool of worker threads.

    Usage:
        pool = ThreadPool(min_workers=4, max_workers=16, queue_size=100)
        pool.start()

        if not pool.submit(handle, args=(conn,), block=False):
            ...  # saturated

        pool.shutdown(wait=True, timeout=5.0)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 60.0,
        overflow: bool = True
    ):
        """
        Args:
            min_workers: Threads started up front.
            max_workers: Ceiling for long-lived workers.
            queue_size: Tasks that may wait for a free worker.
            idle_timeout: How often an idle worker re-checks for shutdown.
            overflow: Start single-task workers once max_workers are all busy.
                With False, queued work waits for a long-lived worker.
        """
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.max_queue_size = queue_size
        self.idle_timeout = idle_timeout
        self.overflow = overflow

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)

        self._workers: List[Worker] = []
        self._overflow_workers: List[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    def start(self):
        """Start min_workers threads. Calling it twice is a no-op."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")

        self._shutdown = False
        with self._lock:
            for _ in range(self.min_workers):
                self._spawn_worker()

        self._started = True

    def _spawn_worker(self, single_task: bool = False) -> Worker:
        # Caller holds self._lock
        worker = Worker(
            task_queue=self._task_queue,
            worker_id=self._next_worker_id,
            idle_timeout=self.idle_timeout,
            single_task=single_task
        )
        self._next_worker_id += 1
        if single_task:
            self._overflow_workers.append(worker)
        else:
            self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[Dict[str, Any]] = None,
        block: bool = True,
        queue_timeout: Optional[float] = None
    ) -> bool:
        """
        Queue ``func(*args, **kwargs)``.

        Args:
            func: The callable to run on a worker.
            args: Positional arguments.
            kwargs: Keyword arguments.
            block: Wait for room when the queue is full.
            queue_timeout: Upper bound on that wait.

        Returns:
            True if queued, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        """Add one worker if more tasks are waiting than workers are idle."""
        with self._lock:
            self._overflow_workers = [w for w in self._overflow_workers if w.is_alive()]

            if self.pending <= self.idle_workers:
                return

            if len(self._workers) < self.max_workers:
                logger.debug(
                    f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
                )
                self._spawn_worker()
            elif self.overflow:
                logger.debug(
                    f"All {self.max_workers} workers busy, starting overflow worker "
                    f"({len(self._overflow_workers) + 1} running)"
                )
                self._spawn_worker(single_task=True)

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let queued tasks finish first.
            timeout: Give up waiting for the queue after this many seconds.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            if timeout is not None:
                deadline = time.time() + timeout
                while self._task_queue.unfinished_tasks:
                    if time.time() > deadline:
                        logger.warning("Shutdown timeout, forcing stop")
                        break
                    time.sleep(0.05)
            else:
                self._task_queue.join()

        with self._lock:
            workers = self._workers + [w for w in self._overflow_workers if w.is_alive()]
            self._workers = []
            self._overflow_workers = []

        for worker in workers:
            worker.shutdown()
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                pass

        for worker in workers:
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    @property
    def worker_count(self) -> int:
        """Long-lived workers; overflow workers are not counted."""
        return len(self._workers)

    @property
    def overflow_count(self) -> int:
        return sum(1 for w in list(self._overflow_workers) if w.is_alive())

    def _all_workers(self) -> List[Worker]:
        return list(self._workers) + list(self._overflow_workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._all_workers() if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for w in self._all_workers() if w.state == WorkerState.IDLE)

    @property
    def pending(self) -> int:
        """Tasks waiting for a worker."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        """Worker and task counters, e.g. for a debug log line."""
        workers = self._all_workers()
        return {
            "workers": {
                "total": self.worker_count,
                "overflow": self.overflow_count,
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self.pending,
                "completed": sum(w.tasks_completed for w in workers),
                "failed": sum(w.tasks_failed for w in workers),
            },
        }
