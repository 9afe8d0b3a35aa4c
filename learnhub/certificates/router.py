from fastapi import APIRouter, Depends
from typing import List

from learnhub.core.auth import UserContext, get_current_user, require_admin
from learnhub.core.dependencies import get_issuer
from learnhub.certificates.issuer import CertificateIssuer
from learnhub.certificates.models import CertificateIssueRequest, CertificateResponse, CertificateVerification

router = APIRouter(prefix="/certificates", tags=["Certificates"])


@router.post("", response_model=CertificateResponse, status_code=201)
async def issue_certificate(
    data: CertificateIssueRequest,
    issuer: CertificateIssuer = Depends(get_issuer),
    admin: UserContext = Depends(require_admin)
):
    """Manual issuance (normally triggered by course completion)"""
    return await issuer.issue(data.user_id, data.course_id)


@router.get("/my-certificates", response_model=List[CertificateResponse])
async def my_certificates(
    issuer: CertificateIssuer = Depends(get_issuer),
    user: UserContext = Depends(get_current_user)
):
    return await issuer.list_for_user(user.user_id)


@router.get("/verify/{certificate_id}", response_model=CertificateVerification)
async def verify_certificate(certificate_id: str, issuer: CertificateIssuer = Depends(get_issuer)):
    """Public: anyone holding the id can check it"""
    return await issuer.verify(certificate_id)


@router.get("/{certificate_id}", response_model=CertificateResponse)
async def get_certificate(
    certificate_id: str,
    issuer: CertificateIssuer = Depends(get_issuer),
    user: UserContext = Depends(get_current_user)
):
    return await issuer.get(certificate_id, user)


@router.delete("/{certificate_id}")
async def revoke_certificate(
    certificate_id: str,
    issuer: CertificateIssuer = Depends(get_issuer),
    admin: UserContext = Depends(require_admin)
):
    await issuer.revoke(certificate_id)
    return {"message": "Certificate revoked successfully."}
