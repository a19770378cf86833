import threading
import time
from datetime import datetime, timedelta
from typing import Callable, List, Dict, Any, Optional
from core import logger


class Scheduler:
    """
    Task scheduler for one time and interval tasks.

    Due jobs run one after another on the loop thread, so the loop thread is the
    single owner of whatever state the jobs touch. An interval job can never
    overlap with itself.
    """
    def __init__(self, delay: float = 0.05):
        self.jobs: List[Dict[str, Any]] = []
        self.running = False
        self.delay = delay
        self._lock = threading.RLock()
        self._current_job: Optional[Dict[str, Any]] = None
        self._batch: List[Dict[str, Any]] = []
        self._thread: Optional[threading.Thread] = None

    def start_loop(self):
        """
        Starts the scheduler
        :return:
        """
        if self.running:
            return
        self.running = True
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name="AppScheduler")
        self._thread.start()

    def _run_loop(self):
        while self.running:
            self.run_pending()
            time.sleep(self.delay)

    def run_pending(self, now: datetime = None) -> int:
        """
        Run every job that is due at `now`. Jobs of the pass that get removed
        before their turn are skipped and never requeued.
        :param now: defaults to the current time
        :return: number of jobs that were due
        """
        now = now or datetime.now()

        with self._lock:
            # Filter out jobs that are due
            jobs_to_run = []
            pending_jobs = []
            for job in self.jobs:
                if now >= job['time']:
                    jobs_to_run.append(job)
                else:
                    pending_jobs.append(job)
            self.jobs = pending_jobs
            jobs_to_run.sort(key=lambda j: j['time'])
            self._batch = list(jobs_to_run)

        while True:
            with self._lock:
                if not self._batch:
                    break
                job = self._batch.pop(0)
                if job['cancelled']:
                    continue
                self._current_job = job

            try:
                job['func'](*job['args'])
            except Exception as e:
                logger.error(f"[Scheduler] Job {job['name']} failed: {e}")
            finally:
                with self._lock:
                    self._current_job = None
                    if job['interval'] and not job['cancelled']:
                        job['time'] = now + timedelta(seconds=job['interval'])
                        self.jobs.append(job)

        return len(jobs_to_run)

    def _make_job(self, name: str, func: Callable, run_time: datetime, args: tuple, interval=None):
        return {
            "name": name,
            "func": func,
            "args": args,
            "time": run_time,
            "interval": interval,
            "cancelled": False,
        }

    def add_job(self, name: str, func: Callable, delay_seconds: float, args: tuple = (), unique: bool = False):
        """
        Adds a job. If unique=True, replaces any existing job with the same name (Debounce).

        :param name:
        :param func:
        :param delay_seconds:
        :param unique:
        :param args:
        :return: job
        """
        job = self._make_job(name, func, datetime.now() + timedelta(seconds=delay_seconds), args)

        with self._lock:
            if unique:
                self.remove_job_by_name(name)
            self.jobs.append(job)

        return job

    def add_interval_job(self, name: str, func: Callable, interval_seconds: float, args: tuple = ()):
        """
        Adds a recurring job, first run one interval from now. Replaces any job with the same name.
        :param name:
        :param func:
        :param interval_seconds:
        :param args:
        :return: job
        """
        job = self._make_job(name, func, datetime.now() + timedelta(seconds=interval_seconds), args,
                             interval=interval_seconds)
        with self._lock:
            self.remove_job_by_name(name)
            self.jobs.append(job)
        return job

    def call_soon(self, name: str, func: Callable, *args):
        """
        Marshal a call onto the scheduler thread
        :param name:
        :param func:
        :param args:
        :return:
        """
        return self.add_job(name, func, 0, args)

    def remove_job_by_name(self, name: str):
        """
        Remove the specified job from the schedule, including jobs of the pass in
        flight and a running interval job
        :param name:
        :return:
        """
        with self._lock:
            for job in self.jobs + self._batch:
                if job['name'] == name:
                    job['cancelled'] = True
            self.jobs = [j for j in self.jobs if j['name'] != name]

            current = self._current_job
            if current is not None and current['name'] == name:
                current['cancelled'] = True

    def has_job(self, name: str) -> bool:
        with self._lock:
            current = [self._current_job] if self._current_job and self._current_job['interval'] else []
            return any(j['name'] == name and not j['cancelled'] for j in self.jobs + self._batch + current)

    def stop(self):
        """
        Stops the scheduler
        :return:
        """
        self.running = False
