from campus_reservations.models.resource.university_resource import (
    FacilityApprovalWorkflow,
    UniversityResource,
)

__all__ = ["FacilityApprovalWorkflow", "UniversityResource"]
