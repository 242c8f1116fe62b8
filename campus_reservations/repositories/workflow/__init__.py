from campus_reservations.repositories.workflow.workflow_repository import WorkflowRepository

__all__ = ["WorkflowRepository"]
