import pytest

from learnhub.core.errors import CodeNotFound, EmailTaken, GenerationExhausted
from learnhub.users.service import register_user, get_user
from conftest import make_user


def _payload(**overrides):
    data = {"first_name": "Kofi", "last_name": "Boateng", "email": "Kofi@Example.com", "role": "jobseeker"}
    data.update(overrides)
    return data


async def test_register_assigns_referral_code(db, linker):
    user = await register_user(db, linker, _payload())

    assert user["email"] == "kofi@example.com"
    assert len(user["referral_code"]) == 8
    assert user["points"] == 0
    assert (await get_user(db, user["user_id"]))["referral_code"] == user["referral_code"]


async def test_register_with_referral_links_users(db, linker):
    referrer = await make_user(db, referral_code="D00D0001")

    user = await register_user(db, linker, _payload(referred_by="D00D0001"))

    referral = await db.referrals.find_one({"referred_user_id": user["user_id"]})
    assert referral["referrer_id"] == referrer["user_id"]
    assert referral["status"] == "pending"
    assert user["referred_by"] == "D00D0001"


async def test_register_with_bad_code_writes_nothing(db, linker):
    with pytest.raises(CodeNotFound):
        await register_user(db, linker, _payload(referred_by="00000000"))
    assert await db.users.count_documents({}) == 0


async def test_duplicate_email(db, linker):
    await register_user(db, linker, _payload())
    with pytest.raises(EmailTaken):
        await register_user(db, linker, _payload(email="kofi@example.com"))


async def test_register_regenerates_code_lost_to_another_user(db, linker, monkeypatch):
    await make_user(db, referral_code="TAKEN001")
    codes = iter(["TAKEN001", "FRESH001"])

    async def racing_generate(kind):
        # The first code was free when checked and taken by insert time
        return next(codes)

    monkeypatch.setattr(linker.generator, "generate", racing_generate)

    user = await register_user(db, linker, _payload())

    assert user["referral_code"] == "FRESH001"
    assert await db.users.count_documents({"email": "kofi@example.com"}) == 1


async def test_register_gives_up_when_codes_keep_colliding(db, linker, monkeypatch):
    await make_user(db, referral_code="TAKEN001")

    async def always_taken(kind):
        return "TAKEN001"

    monkeypatch.setattr(linker.generator, "generate", always_taken)

    with pytest.raises(GenerationExhausted):
        await register_user(db, linker, _payload())
    assert await db.users.count_documents({"email": "kofi@example.com"}) == 0
