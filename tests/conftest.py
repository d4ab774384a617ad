from __future__ import annotations

import asyncio
import dataclasses
from unittest.mock import AsyncMock

import pytest

from diski.jobs import JobRemoved, JobSubscription
from diski.states import DisplayState, UnitState
from diski.streams import Stream


async def settle(rounds: int = 20) -> None:
    """Let every runnable task advance until it blocks again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeManager:
    """In-memory stand-in for SystemdManager's JobRemoved fan-out."""

    def __init__(self) -> None:
        self.subscriptions: list[Stream] = []
        self.subscribed_total = 0

    def job_removed(self) -> JobSubscription:
        stream = Stream("JobRemoved")
        self.subscriptions.append(stream)
        self.subscribed_total += 1
        return JobSubscription(stream, self.subscriptions.remove)

    def emit(self, job: str, unit: str = "other.service", result: str = "done", job_id: int = 0) -> None:
        event = JobRemoved(id=job_id, job=job, unit=unit, result=result)
        for stream in list(self.subscriptions):
            stream.push(event)

    def disconnect(self) -> None:
        for stream in list(self.subscriptions):
            stream.close()


class FakeUnit:
    """
    Stand-in for SystemdUnit. sub_state() reports `token`; start()/stop()
    return the next job path after passing it to `on_issue`, which tests use
    to emit JobRemoved before the method reply.
    """

    def __init__(self, name: str, token: str = "dead") -> None:
        self.name = name
        self.changes = Stream(f"{name} SubState")
        self.token = token
        self.reads = 0
        self.calls: list[str] = []
        self.jobs: list[str] = []
        self.on_issue = None
        self.fail_with: Exception | None = None
        self._next_job = 1

    def notify(self, token: str | None = None) -> None:
        if token is not None:
            self.token = token
        self.changes.push(self.name)

    async def sub_state(self) -> str:
        self.reads += 1
        return self.token

    async def _issue(self, operation: str) -> str:
        self.calls.append(operation)
        if self.fail_with is not None:
            raise self.fail_with
        job = f"/org/freedesktop/systemd1/job/{self.name}/{self._next_job}"
        self._next_job += 1
        self.jobs.append(job)
        if self.on_issue is not None:
            self.on_issue(job)
        return job

    async def start(self) -> str:
        return await self._issue("start")

    async def stop(self) -> str:
        return await self._issue("stop")


class FakeDisplay:
    def __init__(self, state: DisplayState) -> None:
        self.state = state
        self.updates: list[dict] = []

    def update(self, **fields) -> None:
        self.updates.append(fields)
        self.state = dataclasses.replace(self.state, **fields)


@pytest.fixture
def manager() -> FakeManager:
    return FakeManager()


@pytest.fixture
def gate() -> AsyncMock:
    gate = AsyncMock()
    gate.allows.return_value = True
    return gate


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def display() -> FakeDisplay:
    return FakeDisplay(DisplayState(UnitState.DEAD, UnitState.DEAD, "Backup"))
