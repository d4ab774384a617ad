import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from diski.exceptions import StreamClosedError
from diski.streams import Stream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobRemoved:
    """Payload of systemd's Manager.JobRemoved signal."""

    id: int
    job: str  # object path, e.g. /org/freedesktop/systemd1/job/1234
    unit: str
    result: str  # done, canceled, timeout, failed, dependency, skipped


class JobSubscription:
    """Buffered view of every JobRemoved on the bus while it is open."""

    def __init__(self, stream: Stream, on_close: Callable[[Stream], None]) -> None:
        self._stream = stream
        self._on_close = on_close

    def __enter__(self) -> "JobSubscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._on_close(self._stream)

    async def next(self) -> JobRemoved:
        return await self._stream.get()


async def wait_for_job(manager: Any, issue: Callable[[], Awaitable[str]]) -> JobRemoved:
    """
    Run a unit operation and wait until systemd reports its job as removed.

    `manager` is anything with a job_removed() method returning a
    JobSubscription (SystemdManager in practice). `issue` starts the
    operation and returns the job path, e.g. `unit.stop`.

    The subscription is opened before `issue` is called: systemd may finish
    a job before the method reply reaches us, and JobRemoved for it must
    already be buffered by then. Events for other jobs are dropped.
    """
    with manager.job_removed() as removed:
        job = await issue()
        logger.info("Queued job %s", job)
        while True:
            try:
                event = await removed.next()
            except StreamClosedError as e:
                raise StreamClosedError(f"JobRemoved stream ended before {job} finished") from e
            if event.job != job:
                logger.debug("Ignoring job %s for %s (%s)", event.job, event.unit, event.result)
                continue
            if event.result == "done":
                logger.info("Job %s for %s finished", job, event.unit)
            else:
                logger.warning("Job %s for %s finished with result %r", job, event.unit, event.result)
            return event


async def join(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently; the first failure cancels the rest and is re-raised."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise
