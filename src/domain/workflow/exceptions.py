from typing import Any, Dict, Optional

class WorkflowException(Exception):
    def __init__(
        self,
        message: str,
        error_code: str = "WORKFLOW_ERROR",
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        super().__init__(self.message)

class WorkflowBuildError(WorkflowException):
    """The reference is well-formed but does not denote a buildable workflow."""

    def __init__(self, reference: str, reason: str):
        self.reference = reference
        self.reason = reason
        super().__init__(
            message=f"Could not build workflow from {reference}: {reason}",
            error_code="WORKFLOW_BUILD_FAILED",
            context={"reference": reference, "reason": reason}
        )

class BundleUnreadableError(WorkflowException):
    def __init__(self, workflow_id: str, details: str):
        self.workflow_id = workflow_id
        super().__init__(
            message=f"Research Object bundle for workflow '{workflow_id}' could not be read",
            error_code="BUNDLE_UNREADABLE",
            context={"workflow_id": workflow_id, "details": details}
        )
