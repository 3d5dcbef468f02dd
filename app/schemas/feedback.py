# app/schemas/feedback.py
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Literal, Optional


class OrderFeedbackCreate(BaseModel):
    order_id: int
    rating: int = Field(ge=1, le=5)
    ordering_process_rating: Optional[int] = Field(default=None, ge=1, le=5)
    product_quality_rating: Optional[int] = Field(default=None, ge=1, le=5)
    delivery_speed_rating: Optional[int] = Field(default=None, ge=1, le=5)
    communication_rating: Optional[int] = Field(default=None, ge=1, le=5)
    would_recommend: bool
    comments: Optional[str] = None


class OrderFeedback(BaseModel):
    id: int
    order_id: int
    client_id: int
    rating: int
    ordering_process_rating: int | None = None
    product_quality_rating: int | None = None
    delivery_speed_rating: int | None = None
    communication_rating: int | None = None
    would_recommend: bool
    comments: str | None = None
    admin_response: str | None = None
    responded_at: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class FeedbackAdminResponse(BaseModel):
    admin_response: str


IssueStatus = Literal["open", "investigating", "resolved", "closed"]


class IssueReportCreate(BaseModel):
    order_id: Optional[int] = None
    issue_type: Literal["bug", "feature_request", "confusion", "other"]
    severity: Literal["low", "medium", "high", "critical"]
    title: str
    description: str
    steps: Optional[str] = None
    expected_behavior: Optional[str] = None
    actual_behavior: Optional[str] = None
    browser_info: str
    screen_size: str


class IssueReport(BaseModel):
    id: int
    user_id: int
    user_type: str
    order_id: int | None = None
    issue_type: str
    severity: str
    title: str
    description: str
    steps: str | None = None
    expected_behavior: str | None = None
    actual_behavior: str | None = None
    browser_info: str
    screen_size: str
    status: IssueStatus
    created_at: datetime | None = None
    resolved_at: datetime | None = None

    class Config:
        from_attributes = True


class IssueStatusUpdate(BaseModel):
    status: IssueStatus
