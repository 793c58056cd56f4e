# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the per-key async lock registry."""

import asyncio

import pytest

from tenancy_core.domains.account.locks import KeyedLock


class TestKeyedLock:
    """Tests for KeyedLock."""

    @pytest.mark.asyncio
    async def test_entry_removed_after_release(self) -> None:
        """Test the registry is empty once no task holds a key."""
        locks = KeyedLock()

        async with locks.hold("alice"):
            assert locks.is_locked("alice")
            assert len(locks) == 1

        assert not locks.is_locked("alice")
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self) -> None:
        """Test holders of the same key never overlap."""
        locks = KeyedLock()
        active = 0
        max_active = 0

        async def worker() -> None:
            nonlocal active, max_active
            async with locks.hold("eve"):
                active += 1
                max_active = max(max_active, active)
                await asyncio.sleep(0)
                active -= 1

        await asyncio.gather(*(worker() for _ in range(5)))

        assert max_active == 1
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_different_keys_do_not_block(self) -> None:
        """Test a held key does not block another key."""
        locks = KeyedLock()
        entered = asyncio.Event()

        async def hold_eve() -> None:
            async with locks.hold("eve"):
                await entered.wait()

        task = asyncio.create_task(hold_eve())
        await asyncio.sleep(0)

        async with locks.hold("frank"):
            assert locks.is_locked("eve")
            entered.set()

        await task
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_entry_removed_after_exception(self) -> None:
        """Test the lock is released when the block raises."""
        locks = KeyedLock()

        with pytest.raises(RuntimeError):
            async with locks.hold("alice"):
                raise RuntimeError("boom")

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_empty_and_none_keys(self) -> None:
        """Test unusual keys are accepted."""
        locks = KeyedLock()

        async with locks.hold(""):
            async with locks.hold(None):
                assert len(locks) == 2

        assert len(locks) == 0
