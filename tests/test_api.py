from conftest import auth_header, make_course, make_user


async def test_health(api):
    response = await api.get("/health")
    assert response.status_code == 200


async def test_requires_token(api):
    response = await api.get("/api/progress/my-courses-progress")
    assert response.status_code == 401

    response = await api.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_register_and_me(api):
    response = await api.post("/api/users/register", json={
        "first_name": "Efua", "last_name": "Owusu", "email": "efua@example.com"
    })
    assert response.status_code == 201
    user = response.json()

    me = await api.get("/api/users/me", headers=auth_header(user["user_id"]))
    assert me.json()["referral_code"] == user["referral_code"]


async def test_admin_cannot_self_register(api):
    response = await api.post("/api/users/register", json={
        "first_name": "Root", "last_name": "User", "email": "root@example.com", "role": "admin"
    })
    assert response.status_code == 403


async def test_course_and_modules(api, db):
    instructor = await make_user(db, role="instructor")
    stranger = await make_user(db)
    headers = auth_header(instructor["user_id"])

    response = await api.post("/api/courses", headers=headers, json={
        "title": "SQL 101", "description": "Queries", "category": "Technology", "price": 0
    })
    assert response.status_code == 201
    course_id = response.json()["course_id"]

    # Video modules need a link
    response = await api.post(f"/api/courses/{course_id}/modules", headers=headers, json={"title": "Intro", "type": "Video"})
    assert response.status_code == 422

    response = await api.post(f"/api/courses/{course_id}/modules", headers=headers, json={
        "title": "Intro", "type": "Video", "url": "https://videos.test/1"
    })
    assert response.status_code == 201
    module_id = response.json()["module_id"]

    response = await api.post(f"/api/courses/{course_id}/modules", headers=auth_header(stranger["user_id"]), json={
        "title": "Hijack", "type": "Quiz"
    })
    assert response.status_code == 403

    response = await api.put(f"/api/courses/{course_id}/modules/{module_id}", headers=headers, json={"title": "Welcome"})
    assert response.json()["title"] == "Welcome"

    course = (await api.get(f"/api/courses/{course_id}")).json()
    assert [m["title"] for m in course["modules"]] == ["Welcome"]

    response = await api.delete(f"/api/courses/{course_id}/modules/{module_id}", headers=headers)
    assert response.status_code == 200
    response = await api.delete(f"/api/courses/{course_id}/modules/{module_id}", headers=headers)
    assert response.status_code == 404


async def test_course_update_and_delete(api, db):
    owner = await make_user(db, role="instructor")
    admin = await make_user(db, role="admin")
    stranger = await make_user(db, role="instructor")
    course = await make_course(db, instructor_id=owner["user_id"])
    url = f"/api/courses/{course['course_id']}"

    response = await api.put(url, headers=auth_header(stranger["user_id"]), json={"title": "Mine now"})
    assert response.status_code == 403

    response = await api.put(url, headers=auth_header(owner["user_id"]), json={"title": "Data II", "price": 25})
    assert response.status_code == 200
    updated = response.json()
    assert (updated["title"], updated["price"], updated["description"]) == ("Data II", 25, "Basics")
    assert len(updated["modules"]) == 2

    response = await api.delete(url, headers=auth_header(stranger["user_id"]))
    assert response.status_code == 403

    response = await api.delete(url, headers=auth_header(admin["user_id"]))
    assert response.status_code == 200
    assert (await api.get(url)).status_code == 404
    assert (await api.delete(url, headers=auth_header(admin["user_id"]))).status_code == 404


async def test_completing_course_issues_certificate(api, db, notifier):
    user = await make_user(db)
    course = await make_course(db, module_count=2)
    headers = auth_header(user["user_id"])

    for module_id in ["m1", "m2", "m2"]:
        response = await api.post("/api/progress/complete-module", headers=headers, json={
            "course_id": course["course_id"], "module_id": module_id
        })
        assert response.status_code == 200

    assert response.json()["updated"] is False
    assert len(response.json()["progress"]["modules_completed"]) == 2

    certs = (await api.get("/api/certificates/my-certificates", headers=headers)).json()
    assert len(certs) == 1
    assert [e for e, _ in notifier.events].count("certificate_issued") == 1

    verification = (await api.get(f"/api/certificates/verify/{certs[0]['certificate_id']}")).json()
    assert verification["is_valid"] is True

    summary = (await api.get("/api/progress/my-courses-progress", headers=headers)).json()
    assert summary[0]["completion_percentage"] == 100.0


async def test_invalid_module_is_400(api, db):
    user = await make_user(db)
    course = await make_course(db)
    response = await api.post("/api/progress/complete-module", headers=auth_header(user["user_id"]), json={
        "course_id": course["course_id"], "module_id": "m42"
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Module does not belong to this course"


async def test_missing_progress_is_404(api, db):
    user = await make_user(db)
    response = await api.get("/api/progress/COURSE_X", headers=auth_header(user["user_id"]))
    assert response.status_code == 404


async def test_certificate_admin_routes(api, db):
    admin = await make_user(db, role="admin")
    user = await make_user(db)
    course = await make_course(db)

    response = await api.post("/api/certificates", headers=auth_header(user["user_id"]), json={
        "user_id": user["user_id"], "course_id": course["course_id"]
    })
    assert response.status_code == 403

    body = {"user_id": user["user_id"], "course_id": course["course_id"]}
    response = await api.post("/api/certificates", headers=auth_header(admin["user_id"]), json=body)
    assert response.status_code == 201
    certificate_id = response.json()["certificate_id"]

    response = await api.post("/api/certificates", headers=auth_header(admin["user_id"]), json=body)
    assert response.status_code == 400

    response = await api.get(f"/api/certificates/{certificate_id}", headers=auth_header(user["user_id"]))
    assert response.status_code == 200

    response = await api.delete(f"/api/certificates/{certificate_id}", headers=auth_header(admin["user_id"]))
    assert response.status_code == 200
    assert (await api.get(f"/api/certificates/verify/{certificate_id}")).json()["is_valid"] is False


async def test_referral_flow(api, db):
    admin = await make_user(db, role="admin")
    referrer = await make_user(db)
    admin_headers = auth_header(admin["user_id"])

    code = (await api.get("/api/referrals/my-code", headers=auth_header(referrer["user_id"]))).json()["referral_code"]

    response = await api.post("/api/users/register", json={
        "first_name": "Yaw", "last_name": "Asante", "email": "yaw@example.com", "referred_by": code
    })
    referred = response.json()

    referrals = (await api.get("/api/referrals", headers=admin_headers)).json()
    assert len(referrals) == 1
    referral_id = referrals[0]["referral_id"]

    response = await api.post("/api/referrals", headers=admin_headers, json={
        "referred_user_id": referred["user_id"], "referral_code": code
    })
    assert response.status_code == 400

    response = await api.patch(f"/api/referrals/{referral_id}", headers=admin_headers, json={"status": "bogus"})
    assert response.status_code == 400

    for _ in range(2):
        response = await api.patch(f"/api/referrals/{referral_id}", headers=admin_headers, json={"status": "approved"})
        assert response.status_code == 200

    me = (await api.get("/api/users/me", headers=auth_header(referrer["user_id"]))).json()
    assert me["points"] == 10

    mine = (await api.get("/api/referrals/my-referrals", headers=auth_header(referrer["user_id"]))).json()
    assert mine[0]["status"] == "approved"
    assert mine[0]["referred_user"]["email"] == "yaw@example.com"

    response = await api.get(f"/api/referrals/{referral_id}", headers=auth_header(referrer["user_id"]))
    assert response.status_code == 403


async def test_unknown_referral_code_is_404(api, db):
    admin = await make_user(db, role="admin")
    user = await make_user(db)
    response = await api.post("/api/referrals", headers=auth_header(admin["user_id"]), json={
        "referred_user_id": user["user_id"], "referral_code": "NOPE0000"
    })
    assert response.status_code == 404
