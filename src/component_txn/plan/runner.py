"""Run a change plan inside a single transaction.

The runner is the installer-level composition over ``Transaction``: it
applies each operation in order, commits only when all of them succeed, and
otherwise stops at the first failure and rolls everything back.
"""

from pathlib import Path
from typing import Any

import structlog

from component_txn.core.constants import COMPONENT_LABEL, LOCAL_TEMP_DIRNAME
from component_txn.core.errors import ComponentTxnError, FileOperationError
from component_txn.core.notifications import NotifyHandler, structlog_handler
from component_txn.fs import primitives
from component_txn.fs.prefix import InstallPrefix
from component_txn.fs.temp import TempStorage, resolve_temp_root
from component_txn.fs.transaction import Transaction
from component_txn.plan.schemas import (
    AddFileOp,
    ChangeOp,
    ChangePlan,
    CopyOp,
    ModifyOp,
    PlanReport,
    RemoveOp,
)


def load_plan(path: str | Path) -> ChangePlan:
    """Load and validate a JSON change plan from disk."""
    return ChangePlan.model_validate_json(Path(path).read_text(encoding="utf-8"))


def apply_op(tx: Transaction, component: str, op: ChangeOp) -> None:
    """Apply one plan operation to an open transaction."""
    match op:
        case AddFileOp():
            tx.write_file(component, op.path, op.content)
        case CopyOp(op="copy_file"):
            tx.copy_file(component, op.path, op.src)
        case CopyOp(op="copy_dir"):
            tx.copy_dir(component, op.path, op.src)
        case CopyOp(op="move_file"):
            tx.move_file(component, op.path, op.src)
        case CopyOp(op="move_dir"):
            tx.move_dir(component, op.path, op.src)
        case RemoveOp(op="remove_file"):
            tx.remove_file(component, op.path)
        case RemoveOp(op="remove_dir"):
            tx.remove_dir(component, op.path)
        case ModifyOp():
            tx.modify_file(op.path)
            abs_path = tx.prefix.abs_path(op.path)
            try:
                handle = open(abs_path, "wb")
            except OSError as e:
                raise FileOperationError(
                    "write_file", abs_path, COMPONENT_LABEL, str(e)
                ) from e
            with handle:
                primitives.write_str(COMPONENT_LABEL, handle, abs_path, op.content)
        case _:
            raise ValueError(f"unsupported operation: {op.op}")


def _error_dict(exc: Exception) -> dict[str, Any]:
    if isinstance(exc, ComponentTxnError) and hasattr(exc, "to_dict"):
        return exc.to_dict()
    return {"error": type(exc).__name__, "reason": str(exc)}


def run_plan(
    plan: ChangePlan,
    root: str | Path,
    *,
    temp_root: str | Path | None = None,
    notify: NotifyHandler | None = None,
    dry_run: bool = False,
    logger: Any = None,
) -> PlanReport:
    """Apply a change plan transactionally.

    Args:
        plan: Validated change plan
        root: Install prefix root
        temp_root: Directory for backups; defaults to a directory next to
            the install root so backups stay on the same volume
        notify: Notification handler; defaults to the bound structlog logger
        dry_run: If True, only validate and report
        logger: Optional structlog logger instance

    Returns:
        PlanReport describing what was committed or rolled back
    """
    prefix = InstallPrefix(Path(root))
    bound_logger = (logger or structlog.get_logger()).bind(
        component=plan.component,
        root=str(prefix.root),
        dry_run=dry_run,
    )
    handler = notify or structlog_handler(bound_logger)

    report = PlanReport(
        component=plan.component,
        root=str(prefix.root),
        total_ops=len(plan.ops),
        dry_run=dry_run,
    )

    if dry_run:
        bound_logger.info("plan.summary", total_ops=report.total_ops, committed=False)
        return report

    temp_dir = resolve_temp_root(
        temp_root, default=prefix.root.parent / LOCAL_TEMP_DIRNAME
    )
    with TempStorage(temp_dir, notify=handler) as temp:
        tx = Transaction(prefix, temp, handler)
        with tx:
            for index, op in enumerate(plan.ops):
                try:
                    apply_op(tx, plan.component, op)
                except (ComponentTxnError, ValueError) as e:
                    report.failed_index = index
                    report.error = _error_dict(e)
                    bound_logger.warning(
                        "plan.op_failed",
                        index=index,
                        op=op.op,
                        path=op.path.as_posix(),
                        error=str(e),
                    )
                    break
                report.applied_count += 1
            else:
                tx.commit()
        if temp.retained:
            bound_logger.warning(
                "plan.backups_kept",
                temp_root=str(temp.root),
                backups=[str(path) for path in temp.retained],
            )

    report.committed = tx.committed
    report.rollback_errors = tx.rollback_errors

    bound_logger.info(
        "plan.summary",
        total_ops=report.total_ops,
        applied_count=report.applied_count,
        committed=report.committed,
        failed_index=report.failed_index,
        rollback_errors=report.rollback_errors,
    )
    return report
