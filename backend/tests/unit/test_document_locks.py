"""Unit tests for the per-document lock registry."""

import asyncio

import pytest

from kb_embeddings.application.services import DocumentLockRegistry


@pytest.mark.asyncio
async def test_same_document_runs_are_serialized():
    locks = DocumentLockRegistry()
    events: list[str] = []

    async def run(name: str):
        async with locks.hold(1):
            events.append(f"{name}:start")
            await asyncio.sleep(0.01)
            events.append(f"{name}:end")

    await asyncio.gather(run("a"), run("b"))
    assert events == ["a:start", "a:end", "b:start", "b:end"]


@pytest.mark.asyncio
async def test_different_documents_do_not_block_each_other():
    locks = DocumentLockRegistry()
    events: list[str] = []

    async def run(document_id: int):
        async with locks.hold(document_id):
            events.append(f"{document_id}:start")
            await asyncio.sleep(0.01)
            events.append(f"{document_id}:end")

    await asyncio.gather(run(1), run(2))
    assert events[:2] == ["1:start", "2:start"]


@pytest.mark.asyncio
async def test_locks_are_released_after_use():
    locks = DocumentLockRegistry()
    async with locks.hold(7):
        assert len(locks) == 1
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_released_when_body_raises():
    locks = DocumentLockRegistry()
    with pytest.raises(RuntimeError):
        async with locks.hold(3):
            raise RuntimeError("boom")
    assert len(locks) == 0
    async with locks.hold(3):
        pass
