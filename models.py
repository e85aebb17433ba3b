"""Pydantic models for the gateway.

Tool input models double as the advertised JSON Schema: tools/list derives
each inputSchema from the same model tools/call validates against.
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ─── JSON-RPC envelope ──────────────────────────────────────────

class JsonRpcRequest(BaseModel):
    jsonrpc: Literal["2.0"]
    method: str
    params: Optional[Dict[str, Any]] = None
    id: Optional[Union[int, str]] = None


# ─── Token cache ────────────────────────────────────────────────

class CachedToken(BaseModel):
    """Bearer token plus the monotonic instant after which it is stale."""
    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TokenResponse(BaseModel):
    access_token: str
    expires_in: int


# ─── Tool inputs ────────────────────────────────────────────────

class ToolInput(BaseModel):
    """Base for tool arguments; wire names are camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, frozen=True)


class SearchUsersInput(ToolInput):
    query: str = Field(
        ..., min_length=2, max_length=30, description="Search query for user login",
    )


class CursusLevelInput(ToolInput):
    user_id: int = Field(..., description="42 user ID")
    cursus_id: int = Field(21, description="Cursus ID (default: 21 for 42cursus)")


class UserProjectsInput(ToolInput):
    user_id: int = Field(..., description="42 user ID")
    cursus_id: Optional[int] = Field(None, description="Filter by cursus ID (optional)")


class CoalitionInput(ToolInput):
    user_id: int = Field(..., description="42 user ID")


class CampusUsersInput(ToolInput):
    campus_id: Optional[int] = Field(None, description="Campus ID")
    user_id: Optional[int] = Field(None, description="User ID")


class BalancesInput(ToolInput):
    pool_id: Optional[int] = Field(None, description="Pool ID")


class ClustersInput(ToolInput):
    campus_id: Optional[int] = Field(None, description="Campus ID")
    name: Optional[str] = Field(None, description="Substring of cluster name")
    page_size: int = Field(30, ge=1, description="Page size (default 30)")


class LocationsInput(ToolInput):
    campus_id: Optional[int] = Field(None, description="Campus ID")
    active: bool = Field(True, description="Filter for active (currently sitting) users only")
    host: Optional[str] = Field(None, description="Specific host/computer name")
    page_size: int = Field(100, ge=1, description="Page size (default 100)")


class AttachmentsInput(ToolInput):
    project_id: Optional[int] = Field(None, description="Project ID to filter attachments")
    project_session_id: Optional[int] = Field(
        None, description="Project session ID to filter attachments",
    )
    page_size: int = Field(30, ge=1, description="Page size (default 30, max 100)")
    sort: Optional[str] = Field(None, description="Sort field (id, created_at, updated_at, etc.)")


class AttachmentInput(ToolInput):
    attachment_id: int = Field(..., description="Attachment ID")
    project_session_id: Optional[int] = Field(
        None, description="Project session ID (if accessing via project session)",
    )


class ProjectsInput(ToolInput):
    cursus_id: Optional[int] = Field(None, description="Cursus ID to filter projects")
    project_id: Optional[int] = Field(None, description="Parent project ID to filter child projects")
    page_size: int = Field(30, ge=1, description="Page size (default 30, max 100)")
    sort: Optional[str] = Field(None, description="Sort field (id, name, created_at, position, etc.)")
    filter: Optional[str] = Field(
        None, description='Filter field and value (e.g., "exam" for exam projects)',
    )


class ProjectInput(ToolInput):
    project_id: int = Field(..., description="Project ID")


class MyProjectsInput(ToolInput):
    cursus_id: Optional[int] = Field(None, description="Cursus ID to filter projects")
    page_size: int = Field(30, ge=1, description="Page size (default 30, max 100)")
    sort: Optional[str] = Field(None, description="Sort field (id, name, created_at, position, etc.)")


class AccreditationsInput(ToolInput):
    user_id: Optional[int] = Field(None, description="Filter by user ID")
    cursus_id: Optional[int] = Field(None, description="Filter by cursus ID")
    validated: Optional[bool] = Field(None, description="Filter by validation status")
    page_size: int = Field(30, ge=1, description="Page size (default 30, max 100)")
    sort: Optional[str] = Field(
        None,
        description="Sort field (id, name, user_id, cursus_id, difficulty, validated, "
                    "created_at, updated_at)",
    )


class AccreditationInput(ToolInput):
    accreditation_id: int = Field(..., description="Accreditation ID")


# ─── Response Models ────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    server: str
    version: str
