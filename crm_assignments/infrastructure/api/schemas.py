"""Request bodies for the assignment API (camelCase on the wire)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AssignRequest(_CamelModel):
    entity_type: str | None = Field(default=None, alias="entityType")
    entity_id: str | None = Field(default=None, alias="entityId")
    # Required but nullable: an explicit null unassigns, a missing key is a bad request.
    new_owner_id: str | None = Field(..., alias="newOwnerId")
    assigned_by: str | None = Field(default=None, alias="assignedBy")


class BulkAssignRequest(_CamelModel):
    entity_ids: list[str] = Field(default_factory=list, alias="entityIds")
    entity_type: str | None = Field(default=None, alias="entityType")
    new_owner_id: str | None = Field(default=None, alias="newOwnerId")
    assigned_by: str | None = Field(default=None, alias="assignedBy")


class ReassignOrphanedRequest(_CamelModel):
    deleted_user_id: str | None = Field(default=None, alias="deletedUserId")
    new_owner_id: str | None = Field(default=None, alias="newOwnerId")
