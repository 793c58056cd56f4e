# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for account domain models."""

from datetime import timezone

from tenancy_core.domains.account.models import (
    DEFAULT_ROLE,
    Account,
    AuthenticatedAccount,
    LessonProgress,
    MaterializationState,
    ProgressRecord,
    ProvisioningResult,
    ProvisioningStep,
)


class TestAccountMaterialize:
    """Tests for the account materialization state machine."""

    def test_new_account_is_uninitialized(self) -> None:
        """Test accounts start without a principal."""
        account = Account("alice", "secret")

        assert account.state is MaterializationState.UNINITIALIZED
        assert not account.is_materialized
        assert account.role == DEFAULT_ROLE

    def test_materialize_builds_principal(self) -> None:
        """Test materialize returns the authentication view."""
        account = Account("alice", "secret")

        principal = account.materialize()

        assert principal == AuthenticatedAccount(
            username="alice",
            password="secret",
            authorities=(f"ROLE_{DEFAULT_ROLE}",),
        )
        assert principal.is_enabled
        assert account.state is MaterializationState.INITIALIZED

    def test_materialize_is_idempotent(self) -> None:
        """Test repeated materialization yields the same observable result."""
        account = Account("alice", "secret")

        first = account.materialize()
        second = account.materialize()

        assert first == second
        assert account.state is MaterializationState.INITIALIZED

    def test_repr_hides_principal(self) -> None:
        """Test the cached principal and its password stay out of repr."""
        account = Account("alice", "secret")
        account.materialize()

        assert "_principal" not in repr(account)


class TestProgressRecord:
    """Tests for per-tenant progress tracking."""

    def test_new_record_is_empty(self) -> None:
        """Test a fresh record has no lessons."""
        record = ProgressRecord("alice")

        assert record.lessons == {}
        assert record.solved_count() == 0
        assert record.created_at.tzinfo is timezone.utc

    def test_lesson_is_created_on_first_access(self) -> None:
        """Test lesson() creates and then reuses progress."""
        record = ProgressRecord("alice")

        first = record.lesson("SqlInjection")
        second = record.lesson("SqlInjection")

        assert first is second
        assert first.attempts == 0

    def test_solved_and_failed_assignments(self) -> None:
        """Test attempts and solved assignments are tracked per lesson."""
        record = ProgressRecord("alice")

        record.assignment_failed("SqlInjection")
        record.assignment_solved("SqlInjection", "assignment1")
        record.assignment_solved("SqlInjection", "assignment1")
        record.assignment_solved("XSS", "assignment2")

        assert record.lesson("SqlInjection").attempts == 3
        assert record.lesson("SqlInjection").solved_assignments == {"assignment1"}
        assert record.solved_count() == 2

    def test_reset_clears_one_lesson(self) -> None:
        """Test reset only affects the named lesson."""
        record = ProgressRecord("alice")
        record.assignment_solved("SqlInjection", "a1")
        record.assignment_solved("XSS", "a2")

        record.reset("SqlInjection")

        assert record.lesson("SqlInjection").solved_assignments == set()
        assert record.lesson("SqlInjection").attempts == 0
        assert record.solved_count() == 1

    def test_lessons_to_dict(self) -> None:
        """Test serialization sorts solved assignments."""
        record = ProgressRecord("alice")
        record.assignment_solved("XSS", "b")
        record.assignment_solved("XSS", "a")

        assert record.lessons_to_dict() == {
            "XSS": {"solved_assignments": ["a", "b"], "attempts": 2}
        }

    def test_lesson_progress_from_dict(self) -> None:
        """Test lesson progress restores from its serialized form."""
        progress = LessonProgress.from_dict(
            "XSS", {"solved_assignments": ["a", "b"], "attempts": 4}
        )

        assert progress.lesson == "XSS"
        assert progress.solved_assignments == {"a", "b"}
        assert progress.attempts == 4

    def test_lesson_progress_from_empty_dict(self) -> None:
        """Test missing keys default to no progress."""
        progress = LessonProgress.from_dict("XSS", {})

        assert progress.solved_assignments == set()
        assert progress.attempts == 0


class TestProvisioningResult:
    """Tests for provisioning outcomes."""

    def test_defaults(self) -> None:
        """Test a fresh result is in progress, not succeeded."""
        result = ProvisioningResult("alice")

        assert result.in_progress
        assert not result.succeeded
        assert result.created is False
        assert result.completed_steps == []

    def test_finish_without_failure_succeeds(self) -> None:
        result = ProvisioningResult("alice")
        result.mark(ProvisioningStep.CHECK_EXISTENCE)
        result.finish()

        assert result.succeeded
        assert not result.in_progress

    def test_failed_step_marks_failure(self) -> None:
        """Test a failed step makes the result unsuccessful."""
        result = ProvisioningResult("alice")
        result.mark(ProvisioningStep.CHECK_EXISTENCE)
        result.failed_step = ProvisioningStep.PERSIST_ACCOUNT

        assert not result.succeeded
        assert not result.in_progress
        assert result.completed_steps == [ProvisioningStep.CHECK_EXISTENCE]

    def test_steps_are_ordered(self) -> None:
        """Test the step enum lists steps in execution order."""
        assert [s.value for s in ProvisioningStep] == [
            "check_existence",
            "persist_account",
            "persist_progress",
            "provision_schema",
            "run_migrations",
        ]
