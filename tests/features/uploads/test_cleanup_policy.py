"""Tests for the cleanup policy and stale session sweeping."""

import os
import time
from datetime import timedelta

import pytest

from dicom_vault.core.value_objects import SessionKey
from dicom_vault.features.uploads.services import StaleSessionSweeper


class TestCleanupPolicy:
    """Test idempotent staging cleanup."""

    @pytest.mark.asyncio
    async def test_cleanup_removes_chunks_artifact_and_directory(self, cleanup_policy, staging, session_key, stage_chunk):
        stage_chunk(staging, session_key, 0, b"a")
        stage_chunk(staging, session_key, 1, b"b")
        staging.artifact_path(session_key).write_bytes(b"merged")

        removed = await cleanup_policy.cleanup(session_key)

        assert removed == 3
        assert not staging.session_dir(session_key).exists()

    @pytest.mark.asyncio
    async def test_cleanup_twice_is_a_no_op(self, cleanup_policy, staging, session_key, stage_chunk):
        stage_chunk(staging, session_key, 0, b"a")

        await cleanup_policy.cleanup(session_key)
        assert await cleanup_policy.cleanup(session_key) == 0

    @pytest.mark.asyncio
    async def test_cleanup_of_unknown_session_is_a_no_op(self, cleanup_policy, session_key):
        assert await cleanup_policy.cleanup(session_key) == 0

    @pytest.mark.asyncio
    async def test_cleanup_with_partially_missing_files(self, cleanup_policy, staging, session_key, stage_chunk):
        stage_chunk(staging, session_key, 0, b"a")
        stage_chunk(staging, session_key, 1, b"b").unlink()

        await cleanup_policy.cleanup(session_key)

        assert not staging.session_dir(session_key).exists()

    @pytest.mark.asyncio
    async def test_cleanup_keeps_other_sessions_of_the_same_owner(self, cleanup_policy, staging, owner_id, stage_chunk):
        first = SessionKey(owner_id, "first.dcm")
        second = SessionKey(owner_id, "second.dcm")
        stage_chunk(staging, first, 0, b"a")
        stage_chunk(staging, second, 0, b"b")

        await cleanup_policy.cleanup(first)

        assert staging.staged_indices(second) == {0}

    @pytest.mark.asyncio
    async def test_discard_artifact_keeps_chunks(self, cleanup_policy, staging, session_key, stage_chunk):
        stage_chunk(staging, session_key, 0, b"a")
        staging.artifact_path(session_key).write_bytes(b"merged")

        assert await cleanup_policy.discard_artifact(session_key) is True
        assert await cleanup_policy.discard_artifact(session_key) is False
        assert staging.staged_indices(session_key) == {0}


class TestStaleSessionSweeping:
    """Test removal of abandoned sessions."""

    @staticmethod
    def _age(path, hours):
        past = time.time() - hours * 3600
        for entry in [path, *path.iterdir()]:
            os.utime(entry, (past, past))

    @pytest.mark.asyncio
    async def test_sweep_removes_only_stale_sessions(self, cleanup_policy, staging, owner_id, stage_chunk):
        stale = SessionKey(owner_id, "stale.dcm")
        fresh = SessionKey(owner_id, "fresh.dcm")
        stage_chunk(staging, stale, 0, b"old")
        stage_chunk(staging, fresh, 0, b"new")
        self._age(staging.session_dir(stale), hours=48)

        swept = await cleanup_policy.sweep_stale(timedelta(hours=24))

        assert swept == 1
        assert not staging.session_dir(stale).exists()
        assert staging.staged_indices(fresh) == {0}

    @pytest.mark.asyncio
    async def test_sweep_on_empty_staging_root(self, cleanup_policy):
        assert await cleanup_policy.sweep_stale(timedelta(hours=1)) == 0

    @pytest.mark.asyncio
    async def test_sweeper_skips_sessions_being_completed(self, cleanup_policy, staging, session_guard, session_key, stage_chunk):
        stage_chunk(staging, session_key, 0, b"old")
        self._age(staging.session_dir(session_key), hours=48)
        sweeper = StaleSessionSweeper(cleanup_policy, staging, session_guard, max_age=timedelta(hours=24))

        with session_guard.hold(session_key):
            assert await sweeper.sweep_once() == 0
        assert await sweeper.sweep_once() == 1

    @pytest.mark.asyncio
    async def test_sweeper_start_and_stop(self, cleanup_policy, staging, session_guard):
        sweeper = StaleSessionSweeper(cleanup_policy, staging, session_guard, interval=timedelta(hours=1))

        sweeper.start()
        await sweeper.stop()
        await sweeper.stop()
