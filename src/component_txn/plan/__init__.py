"""Change plans: installer-level sequences of transactional operations."""

from component_txn.plan.runner import load_plan, run_plan
from component_txn.plan.schemas import ChangeOp, ChangePlan, PlanReport

__all__ = ["ChangeOp", "ChangePlan", "PlanReport", "load_plan", "run_plan"]
