from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.database import get_db
from learnhub.identifiers.generator import IdentifierGenerator
from learnhub.notifications.notifier import Notifier
from learnhub.certificates.issuer import CertificateIssuer
from learnhub.progress.evaluator import CompletionEvaluator
from learnhub.referrals.linker import ReferralLinker

# ==================== DEPENDENCY FUNCTIONS ====================

def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_generator(db: AsyncIOMotorDatabase = Depends(get_db)) -> IdentifierGenerator:
    return IdentifierGenerator(db)


def get_issuer(
    db: AsyncIOMotorDatabase = Depends(get_db),
    generator: IdentifierGenerator = Depends(get_generator),
    notifier: Notifier = Depends(get_notifier)
) -> CertificateIssuer:
    return CertificateIssuer(db, generator, notifier)


def get_evaluator(
    db: AsyncIOMotorDatabase = Depends(get_db),
    issuer: CertificateIssuer = Depends(get_issuer)
) -> CompletionEvaluator:
    return CompletionEvaluator(db, issuer)


def get_linker(
    db: AsyncIOMotorDatabase = Depends(get_db),
    generator: IdentifierGenerator = Depends(get_generator),
    notifier: Notifier = Depends(get_notifier)
) -> ReferralLinker:
    return ReferralLinker(db, generator, notifier)
