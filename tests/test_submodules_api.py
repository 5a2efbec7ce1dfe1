from qbank_admin.models.orm import Answer, Question


def test_create_submodule(client, tree):
    r = client.post("/api/submodules", json={"name": "Fog", "moduleId": tree["modules"]["meteo"]})
    assert r.status_code == 201
    assert r.json()["moduleId"] == tree["modules"]["meteo"]


def test_create_validation(client, tree):
    assert client.post("/api/submodules", json={"name": "Fog"}).json()["error"] == "Module ID is required"
    r = client.post("/api/submodules", json={"name": "Fog", "moduleId": 999})
    assert r.status_code == 404 and r.json()["error"] == "Module not found"


def test_list_embeds_module_and_subject(client, tree):
    body = client.get(f"/api/submodules?moduleId={tree['modules']['meteo']}").json()
    assert body["total"] == 2
    first = body["data"][0]
    assert first["name"] == "Atmosphere & Pressure"  # newest first
    assert first["module"]["name"] == "Meteorology"
    assert first["module"]["subject"]["name"] == "Aviation ATPL"


def test_search_reaches_module_and_subject(client, tree):
    by_module = {s["name"] for s in client.get("/api/submodules?search=principles").json()["data"]}
    assert by_module == {"Stall & Drag"}
    by_subject = {s["name"] for s in client.get("/api/submodules?search=MARI").json()["data"]}
    assert by_subject == {"Charts"}


def test_detail_lists_questions_with_answers(client, tree):
    body = client.get(f"/api/submodules/{tree['sub_modules']['icing']}").json()
    assert body["module"]["subject"]["name"] == "Aviation ATPL"
    assert len(body["questions"]) == 3
    assert all(len(q["answers"]) == 2 for q in body["questions"])


def test_update_and_not_found(client, tree):
    icing = tree["sub_modules"]["icing"]
    r = client.put(f"/api/submodules/{icing}", json={"name": "Icing", "moduleId": tree["modules"]["pof"]})
    assert r.status_code == 200 and r.json()["moduleId"] == tree["modules"]["pof"]
    assert client.put("/api/submodules/999", json={"name": "x"}).json()["error"] == "Submodule not found"
    assert client.get("/api/submodules/nope").json()["error"] == "Invalid submodule ID"


def test_delete_cascades(client, make, tree):
    r = client.delete(f"/api/submodules/{tree['sub_modules']['stall']}")
    assert r.json() == {"message": "Submodule deleted successfully"}
    assert make.count(Question) == 8
    assert make.count(Answer) == 16
