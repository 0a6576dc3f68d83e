import logging
import threading
import time
import uuid
from contextlib import contextmanager

from app.config import settings
from app.schemas.password_reset import EmailStep, ResetState
from app.utils.exceptions import FlowBusyException, FlowNotFoundException

logger = logging.getLogger(__name__)


class FlowRecord:
    def __init__(self, flow_id: str, state: ResetState):
        self.id = flow_id
        self.state = state
        self.busy = False
        self.touched_at = time.monotonic()

    def __repr__(self):
        return f"<FlowRecord id={self.id} step={self.state.step} busy={self.busy}>"


class FlowRegistry:
    """
    In-memory store of in-progress reset flows, keyed by a random id.

    A flow is marked busy while one of its submissions runs; a second
    submission in that window is rejected, the first one is not cancelled.
    """

    def __init__(self, idle_minutes: int):
        self.idle_seconds = idle_minutes * 60
        self._flows: dict[str, FlowRecord] = {}
        self._lock = threading.Lock()

    def create(self) -> FlowRecord:
        with self._lock:
            self._purge_idle()
            record = FlowRecord(uuid.uuid4().hex, EmailStep())
            self._flows[record.id] = record
        logger.info(f"Password reset flow {record.id} started")
        return record

    def get(self, flow_id: str) -> FlowRecord:
        with self._lock:
            return self._lookup(flow_id)

    @contextmanager
    def submission(self, flow_id: str):
        """
        Hold the flow busy for the duration of one submission.

        Usage:
            with flow_registry.submission(flow_id) as record:
                record.state = outcome.state
        """
        with self._lock:
            record = self._lookup(flow_id)
            if record.busy:
                raise FlowBusyException()
            record.busy = True
        try:
            yield record
        finally:
            with self._lock:
                record.busy = False
                record.touched_at = time.monotonic()

    def __len__(self) -> int:
        return len(self._flows)

    def _lookup(self, flow_id: str) -> FlowRecord:
        # Caller holds self._lock
        record = self._flows.get(flow_id)
        if record is None:
            raise FlowNotFoundException()
        if self._is_idle(record, time.monotonic()):
            del self._flows[flow_id]
            logger.info(f"Password reset flow {flow_id} expired after inactivity")
            raise FlowNotFoundException()
        return record

    def _is_idle(self, record: FlowRecord, now: float) -> bool:
        return not record.busy and record.touched_at < now - self.idle_seconds

    def _purge_idle(self) -> None:
        # Caller holds self._lock
        now = time.monotonic()
        stale = [fid for fid, r in self._flows.items() if self._is_idle(r, now)]
        for fid in stale:
            del self._flows[fid]
        if stale:
            logger.info(f"Purged {len(stale)} idle password reset flow(s)")


flow_registry = FlowRegistry(settings.FLOW_IDLE_MINUTES)
