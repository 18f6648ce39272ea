"""
Pydantic schemas for stored workflow session records.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionRecordRequest(BaseModel):
    """Request for POST /api/data/sessions."""
    model_config = ConfigDict(populate_by_name=True)

    client_data: Dict[str, Any] = Field(default_factory=dict, alias="clientData")
    search_results: List[Dict[str, Any]] = Field(default_factory=list, alias="searchResults")
    status: str = Field(..., min_length=1, description="e.g. client_found, client_created")
    created_client_id: Optional[str] = Field(None, alias="createdClientId")


class SessionRecordCreateResponse(BaseModel):
    success: bool = True
    sessionId: str


class SessionSummary(BaseModel):
    id: str
    timestamp: Optional[str] = None
    status: Optional[str] = None
    created_client_id: Optional[str] = None
    ragione_sociale: Optional[str] = None


class SessionListResponse(BaseModel):
    success: bool = True
    sessions: List[SessionSummary] = Field(default_factory=list)


class SessionDetailResponse(BaseModel):
    success: bool = True
    session: Dict[str, Any]
