# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account domain models.

This module defines the value types handled by the account service:
- Account: a tenant's identity record with opaque credential material
- AuthenticatedAccount: the authentication-capable view of an account
- ProgressRecord / LessonProgress: per-tenant progress tracking
- ProvisioningStep / ProvisioningResult: how far a provisioning call got
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

DEFAULT_ROLE = "TENANT_USER"


class MaterializationState(str, Enum):
    """Lifecycle of an account's authentication principal."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


@dataclass(frozen=True)
class AuthenticatedAccount:
    """Authentication-capable view of an account.

    Attributes:
        username: Account username.
        password: Stored credential material, returned as-is.
        authorities: Granted authorities derived from the account role.
        is_enabled: Whether the principal may log in.
    """

    username: str
    password: str
    authorities: tuple[str, ...] = ()
    is_enabled: bool = True


@dataclass
class Account:
    """A tenant account.

    The username is the tenant identity and also names the tenant's schema.
    It is case-sensitive and not validated here. The password is stored and
    returned without being inspected.

    Attributes:
        username: Unique account username.
        password: Credential material.
        role: Account role used to build authorities.
        state: Whether the authentication principal has been built.
    """

    username: str
    password: str
    role: str = DEFAULT_ROLE
    state: MaterializationState = MaterializationState.UNINITIALIZED
    _principal: AuthenticatedAccount | None = field(
        default=None, init=False, repr=False, compare=False
    )

    @property
    def is_materialized(self) -> bool:
        """Check whether materialize() has run at least once."""
        return self.state is MaterializationState.INITIALIZED

    def materialize(self) -> AuthenticatedAccount:
        """Build the authentication principal for this account.

        Moves the account from UNINITIALIZED to INITIALIZED. Repeated calls
        rebuild the same principal and leave the state unchanged.

        Returns:
            The authentication-capable view of this account.
        """
        self._principal = AuthenticatedAccount(
            username=self.username,
            password=self.password,
            authorities=(f"ROLE_{self.role}",),
        )
        self.state = MaterializationState.INITIALIZED
        return self._principal


@dataclass
class LessonProgress:
    """Progress of one tenant through a single lesson.

    Attributes:
        lesson: Lesson name.
        solved_assignments: Names of assignments solved so far.
        attempts: Number of submissions, solved or not.
    """

    lesson: str
    solved_assignments: set[str] = field(default_factory=set)
    attempts: int = 0

    def solve(self, assignment: str) -> None:
        self.solved_assignments.add(assignment)
        self.attempts += 1

    def fail(self) -> None:
        self.attempts += 1

    def reset(self) -> None:
        self.solved_assignments.clear()
        self.attempts = 0

    def to_dict(self) -> dict:
        return {
            "solved_assignments": sorted(self.solved_assignments),
            "attempts": self.attempts,
        }

    @classmethod
    def from_dict(cls, lesson: str, data: dict) -> "LessonProgress":
        return cls(
            lesson=lesson,
            solved_assignments=set(data.get("solved_assignments", [])),
            attempts=int(data.get("attempts", 0)),
        )


@dataclass
class ProgressRecord:
    """Per-tenant progress tracking state, one per account.

    Attributes:
        username: Owning account username.
        lessons: Progress keyed by lesson name.
        created_at: When the record was created.
    """

    username: str
    lessons: dict[str, LessonProgress] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def lesson(self, name: str) -> LessonProgress:
        """Get the progress for a lesson, creating it on first access."""
        if name not in self.lessons:
            self.lessons[name] = LessonProgress(lesson=name)
        return self.lessons[name]

    def assignment_solved(self, lesson: str, assignment: str) -> None:
        self.lesson(lesson).solve(assignment)

    def assignment_failed(self, lesson: str) -> None:
        self.lesson(lesson).fail()

    def reset(self, lesson: str) -> None:
        self.lesson(lesson).reset()

    def solved_count(self) -> int:
        """Total number of solved assignments across all lessons."""
        return sum(len(p.solved_assignments) for p in self.lessons.values())

    def lessons_to_dict(self) -> dict[str, dict]:
        return {name: progress.to_dict() for name, progress in self.lessons.items()}


class ProvisioningStep(str, Enum):
    """Ordered steps of account provisioning."""

    CHECK_EXISTENCE = "check_existence"
    PERSIST_ACCOUNT = "persist_account"
    PERSIST_PROGRESS = "persist_progress"
    PROVISION_SCHEMA = "provision_schema"
    RUN_MIGRATIONS = "run_migrations"


@dataclass
class ProvisioningResult:
    """Outcome of a single provisioning call.

    Attributes:
        username: Account being provisioned.
        created: True if the account did not exist before this call.
        completed_steps: Steps that finished, in order.
        failed_step: Step that raised or was cancelled, if any.
        applied_migrations: Revisions applied to the tenant schema.
        finished: Set when the last step of the call returned.
    """

    username: str
    created: bool = False
    completed_steps: list[ProvisioningStep] = field(default_factory=list)
    failed_step: ProvisioningStep | None = None
    applied_migrations: list[str] = field(default_factory=list)
    finished: bool = False

    @property
    def succeeded(self) -> bool:
        """True only once the call ran to its end without a failed step."""
        return self.finished and self.failed_step is None

    @property
    def in_progress(self) -> bool:
        return not self.finished and self.failed_step is None

    def mark(self, step: ProvisioningStep) -> None:
        self.completed_steps.append(step)

    def finish(self) -> None:
        self.finished = True
