from tests.utils import signup


def _program(api, headers, name="BSc Biology"):
    res = api.post("/programs", json={"name": name}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def _subject(api, headers, program_id, name="Biology"):
    res = api.post("/subjects", json={"name": name, "program_id": program_id}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_program_and_subject_crud(api, auth_headers):
    program = _program(api, auth_headers)
    subject = _subject(api, auth_headers, program["id"])

    renamed = api.patch(f"/subjects/{subject['id']}", json={"name": "Cell Biology"}, headers=auth_headers)
    listed = api.get("/subjects", params={"program_id": program["id"]}, headers=auth_headers)

    assert renamed.json()["name"] == "Cell Biology"
    assert [s["id"] for s in listed.json()] == [subject["id"]]

    assert api.delete(f"/programs/{program['id']}", headers=auth_headers).status_code == 204
    assert api.get(f"/programs/{program['id']}", headers=auth_headers).status_code == 404


def test_rows_of_other_users_are_invisible(api, auth_headers):
    program = _program(api, auth_headers)
    subject = _subject(api, auth_headers, program["id"])
    other = signup(api, email="ben@example.com")

    assert api.get("/programs", headers=other).json() == []
    assert api.get(f"/subjects/{subject['id']}", headers=other).status_code == 404
    assert api.patch(f"/programs/{program['id']}", json={"name": "x"}, headers=other).status_code == 404
    assert api.delete(f"/subjects/{subject['id']}", headers=other).status_code == 404
    # cannot file a subject under someone else's program
    res = api.post("/subjects", json={"name": "Intruder", "program_id": program["id"]}, headers=other)
    assert res.status_code == 404


def test_topics_and_materials(api, auth_headers):
    subject = _subject(api, auth_headers, _program(api, auth_headers)["id"])
    topic = api.post("/topics", json={"subject_id": subject["id"], "name": "Cells"}, headers=auth_headers).json()

    created = api.post("/materials", json={
        "subject_id": subject["id"], "topic_id": topic["id"], "title": "Lecture 1", "content": "Membranes",
    }, headers=auth_headers)

    assert created.status_code == 201, created.text
    material = created.json()
    assert material["type"] == "notes"
    assert material["ai_status"] == "pending"

    listed = api.get("/materials", params={"subject_id": subject["id"]}, headers=auth_headers).json()
    assert [m["id"] for m in listed] == [material["id"]]

    updated = api.patch(f"/materials/{material['id']}", json={"ai_status": "completed"}, headers=auth_headers)
    assert updated.json()["ai_status"] == "completed"

    # materials survive their topic
    assert api.delete(f"/topics/{topic['id']}", headers=auth_headers).status_code == 204
    assert api.get(f"/materials/{material['id']}", headers=auth_headers).status_code == 200


def test_material_topic_must_belong_to_the_subject(api, auth_headers):
    program = _program(api, auth_headers)
    biology = _subject(api, auth_headers, program["id"])
    chemistry = _subject(api, auth_headers, program["id"], "Chemistry")
    topic = api.post("/topics", json={"subject_id": chemistry["id"], "name": "Bonds"}, headers=auth_headers).json()

    res = api.post("/materials", json={
        "subject_id": biology["id"], "topic_id": topic["id"], "title": "Wrong place",
    }, headers=auth_headers)

    assert res.status_code == 404


def test_upload_signed_url_download_and_delete(api, auth_headers, storage):
    subject = _subject(api, auth_headers, _program(api, auth_headers)["id"])

    res = api.post(
        "/materials/upload",
        data={"subject_id": str(subject["id"])},
        files={"file": ("week 1 notes.pdf", b"%PDF-1.4 hello", "application/pdf")},
        headers=auth_headers,
    )
    assert res.status_code == 201, res.text
    material = res.json()
    assert material["type"] == "pdf"
    assert material["title"] == "week 1 notes.pdf"
    assert material["file_size"] == len(b"%PDF-1.4 hello")
    assert material["file_path"].endswith("_week_1_notes.pdf")

    signed = api.get(f"/materials/{material['id']}/url", headers=auth_headers).json()
    assert signed["expires_in"] == 3600
    assert signed["signed_url"].startswith("http://testserver/storage/study-materials/")

    download = api.get(signed["signed_url"])
    assert download.status_code == 200
    assert download.content == b"%PDF-1.4 hello"

    tampered = signed["signed_url"].rsplit("token=", 1)[0] + "token=garbage"
    assert api.get(tampered).status_code == 403

    assert api.delete(f"/materials/{material['id']}", headers=auth_headers).status_code == 204
    assert not (storage.root / storage.bucket / material["file_path"]).exists()


def test_signed_token_is_bound_to_one_object(api, storage):
    storage.upload("a/one.txt", b"one")
    storage.upload("a/two.txt", b"two")
    url = storage.create_signed_url("a/one.txt", 60)
    token = url.split("token=", 1)[1]

    assert api.get("/storage/study-materials/a/two.txt", params={"token": token}).status_code == 403
    assert api.get("/storage/other-bucket/a/one.txt", params={"token": token}).status_code == 403


def test_url_for_material_without_file_is_404(api, auth_headers):
    subject = _subject(api, auth_headers, _program(api, auth_headers)["id"])
    material = api.post("/materials", json={"subject_id": subject["id"], "title": "Typed notes"}, headers=auth_headers).json()

    assert api.get(f"/materials/{material['id']}/url", headers=auth_headers).status_code == 404


def test_null_for_required_columns_is_rejected(api, auth_headers):
    program = _program(api, auth_headers)
    subject = _subject(api, auth_headers, program["id"])
    material = api.post("/materials", json={"subject_id": subject["id"], "title": "Lecture 1"}, headers=auth_headers).json()

    assert api.patch(f"/subjects/{subject['id']}", json={"name": None}, headers=auth_headers).status_code == 422
    assert api.patch(f"/programs/{program['id']}", json={"name": None}, headers=auth_headers).status_code == 422
    assert api.patch(f"/materials/{material['id']}", json={"title": None}, headers=auth_headers).status_code == 422

    # nullable columns can still be cleared
    cleared = api.patch(f"/subjects/{subject['id']}", json={"color": None}, headers=auth_headers)
    assert cleared.status_code == 200
    assert api.get(f"/subjects/{subject['id']}", headers=auth_headers).json()["name"] == "Biology"
