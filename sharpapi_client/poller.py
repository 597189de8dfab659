import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional

from loguru import logger

from sharpapi_client.dispatcher import Dispatcher
from sharpapi_client.errors import DecodingError
from sharpapi_client.models import JobRecord, JobStatus, PollingPolicy

RETRY_HINT_HEADER = "retry-after"


class PollState(str, Enum):
    polling = "polling"
    success = "success"
    failed = "failed"
    exhausted = "exhausted"


def parse_retry_hint(headers: Mapping[str, str]) -> Optional[int]:
    """Returns the server-suggested delay in whole seconds, or None if absent or unusable"""
    raw = headers.get(RETRY_HINT_HEADER)
    if raw is None:
        return None
    try:
        seconds = int(str(raw).strip())
    except ValueError:
        return None
    return seconds if seconds > 0 else None


def next_interval(headers: Mapping[str, str], policy: PollingPolicy) -> float:
    if policy.use_server_hint:
        hint = parse_retry_hint(headers)
        if hint is not None:
            return hint
    return policy.base_interval_seconds


def decode_job(body: Any) -> JobRecord:
    """Builds a JobRecord from a `{data: {id, attributes: {...}}}` status body"""
    try:
        data = body["data"]
        attributes = data["attributes"]
        status = JobStatus(attributes["status"])
        return JobRecord(
            id=data.get("id"),
            type=attributes.get("type"),
            status=status,
            result=attributes.get("result") if status == JobStatus.success else None,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodingError(f"Unexpected job status body: {body!r}") from e


class JobPoller:
    def __init__(
        self,
        dispatcher: Dispatcher,
        policy: Optional[PollingPolicy] = None,
        on_status_change: Optional[Callable[[JobRecord], Any]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.dispatcher = dispatcher
        self.policy = policy or dispatcher.config.polling
        self.on_status_change = on_status_change
        self.logger = logger
        self._sleep = sleep

    async def _handle_status_change(
        self, record: JobRecord, last_status: Optional[JobStatus]
    ) -> None:
        """Passes the JobRecord to on_status_change if the status moved since the last poll.

        The callback may be a plain function or a coroutine function.
        """
        if last_status == record.status or self.on_status_change is None:
            return
        self.logger.debug(f"Job {record.id} status changed to {record.status.value}")
        outcome = self.on_status_change(record)
        if inspect.isawaitable(outcome):
            await outcome

    async def await_completion(
        self, handle: str, policy: Optional[PollingPolicy] = None
    ) -> JobRecord:
        """Poll handle until the job is terminal or the policy's wait budget is spent.

        Running out of budget is not an error: the record of the last poll is
        returned as-is, so a `new` or `pending` status means the caller gave up
        waiting and may resume polling with the same handle later.
        """
        policy = policy or self.policy
        elapsed = 0.0
        state = PollState.polling
        last_status: Optional[JobStatus] = None
        snapshot: Optional[JobRecord] = None

        async with self.dispatcher.session() as session:
            while state is PollState.polling:
                response = await self.dispatcher.fetch(handle, session=session)
                snapshot = decode_job(response.body)
                await self._handle_status_change(snapshot, last_status)
                last_status = snapshot.status

                if snapshot.status is JobStatus.success:
                    state = PollState.success
                    continue
                if snapshot.status is JobStatus.failed:
                    state = PollState.failed
                    continue

                interval = next_interval(response.headers, policy)
                elapsed += interval
                if elapsed >= policy.max_wait_seconds:
                    state = PollState.exhausted
                    continue

                self.logger.debug(
                    f"Job at {handle} is {snapshot.status.value}, waiting {interval:.2f}s "
                    f"({elapsed:.2f}/{policy.max_wait_seconds:.2f}s)"
                )
                await self._sleep(interval)

        record = snapshot
        if state is PollState.exhausted:
            self.logger.warning(
                f"Stopped polling {handle} after {policy.max_wait_seconds}s, "
                f"job still {record.status.value}"
            )
        else:
            self.logger.info(f"Job {record.id} finished with status {record.status.value}")
        return record
