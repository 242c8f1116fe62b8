from campus_reservations.services.workflow.workflow_service import WorkflowService

__all__ = ["WorkflowService"]
