"""Pydantic schemas for change plans.

A change plan is an ordered list of file system operations applied to one
component inside a single transaction:
- ChangeOp: One operation, discriminated by its ``op`` field
- ChangePlan: The component name plus its operations
- PlanReport: Outcome of running a plan

All schemas use Pydantic v2 for validation and serialization.
"""

from pathlib import Path, PurePath
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_serializer, field_validator

from component_txn.fs.prefix import check_relative


class _PathOp(BaseModel):
    """Base for operations targeting a path relative to the install prefix."""

    path: Path

    model_config = {"frozen": True}

    @field_validator("path", mode="before")
    @classmethod
    def validate_relative(cls, v: Any) -> str:
        if isinstance(v, str | PurePath):
            return check_relative(v).as_posix()
        raise ValueError("path must be a string")

    @field_serializer("path")
    def serialize_path(self, value: Path) -> str:
        return value.as_posix()


class AddFileOp(_PathOp):
    """Create a new file with the given contents."""

    op: Literal["add", "write"]
    content: str = ""


class CopyOp(_PathOp):
    """Copy or move ``src`` into place at ``path``."""

    op: Literal["copy_file", "copy_dir", "move_file", "move_dir"]
    src: Path

    @field_serializer("src")
    def serialize_src(self, value: Path) -> str:
        return str(value)


class RemoveOp(_PathOp):
    """Remove a file or directory tree at ``path``."""

    op: Literal["remove_file", "remove_dir"]


class ModifyOp(_PathOp):
    """Rewrite (or create) the file at ``path`` with ``content``."""

    op: Literal["modify"]
    content: str


ChangeOp = Annotated[
    AddFileOp | CopyOp | RemoveOp | ModifyOp,
    Field(discriminator="op"),
]


class ChangePlan(BaseModel):
    """Operations for one component, applied in order.

    Attributes:
        component: Component name used in conflict/missing errors
        ops: Operations in application order
    """

    component: str = Field(min_length=1)
    ops: list[ChangeOp] = Field(default_factory=list)


class PlanReport(BaseModel):
    """Summary of a plan run.

    Attributes:
        component: Component the plan was run for
        root: Install prefix root
        total_ops: Number of operations in the plan
        applied_count: Operations that succeeded before commit or failure
        committed: Whether the transaction was committed
        dry_run: Whether the run only validated the plan
        failed_index: Index of the failing operation, if any
        error: Error details for the failing operation, if any
        rollback_errors: Changes that could not be undone during rollback
    """

    component: str
    root: str
    total_ops: int
    applied_count: int = 0
    committed: bool = False
    dry_run: bool = False
    failed_index: int | None = None
    error: dict[str, Any] | None = None
    rollback_errors: int = 0
