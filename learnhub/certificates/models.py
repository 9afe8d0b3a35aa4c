from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class CertificateIssueRequest(BaseModel):
    user_id: str
    course_id: str

class CertificateResponse(BaseModel):
    certificate_id: str
    user_id: str
    course_id: str
    certificate_url: str
    issued_at: datetime
    course_title: Optional[str] = None

class CertificateVerification(BaseModel):
    is_valid: bool
    message: str
    certificate_id: Optional[str] = None
    recipient_name: Optional[str] = None
    course_name: Optional[str] = None
    issued_at: Optional[datetime] = None
