"""Human-readable run summaries."""

from codeagent.core.execution.types import ExecutionResult, RunStatus
from codeagent.intent.types import IntentKind

_ICONS: dict[IntentKind, str] = {
    IntentKind.WRITE: "+",
    IntentKind.EDIT: "~",
    IntentKind.MOVE: ">",
    IntentKind.PLAN: "#",
}


def generate_execution_summary(result: ExecutionResult) -> str:
    """Render completed artifacts, failures, skipped steps and warnings."""
    total = result.total_operations
    lines = [
        "Execution Summary:",
        f"  Completed: {len(result.completed_operations)}/{total} operations",
    ]
    if result.failed_operations:
        lines.append(f"  Failed: {len(result.failed_operations)} operations")
    if result.skipped_operations:
        lines.append(f"  Skipped: {len(result.skipped_operations)} operations")
    if result.warnings:
        lines.append(f"  Warnings: {len(result.warnings)}")

    if result.completed_operations:
        lines.append("")
        lines.append("Created/Modified:")
        for op in result.completed_operations:
            lines.append(f"  {_ICONS.get(op.intent, '*')} {op.target}")

    if result.failed_operations:
        lines.append("")
        lines.append("Failures:")
        for failure in result.failed_operations:
            lines.append(f"  x {failure.operation.label}: {failure.error}")

    if result.skipped_operations:
        lines.append("")
        lines.append("Not attempted:")
        for op in result.skipped_operations:
            lines.append(f"  - {op.label}")

    lines.append("")
    if total == 0:
        lines.append("Nothing to do.")
    elif result.status is RunStatus.ABORTED:
        lines.append("Run aborted; completed steps were kept.")
    elif result.success:
        lines.append("All operations completed successfully.")
    else:
        lines.append("Some operations failed, but others completed successfully.")
    return "\n".join(lines)
