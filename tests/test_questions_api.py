from fastapi.testclient import TestClient

from qbank_admin.api import questions as questions_api
from qbank_admin.main import create_app
from qbank_admin.models.orm import Answer, Question


def _payload(sub_module_id, **over):
    body = {
        "text": "Standard sea level pressure (ISA) is:",
        "subModuleId": sub_module_id,
        "answers": [{"text": "1013.25 hPa", "isCorrect": True}, {"text": "1000 hPa"}],
    }
    body.update(over)
    return body


def test_create_question_with_answers(client, tree):
    r = client.post("/api/questions", json=_payload(str(tree["sub_modules"]["pressure"])))
    assert r.status_code == 201
    body = r.json()
    assert body["subModuleId"] == tree["sub_modules"]["pressure"]
    assert [(a["text"], a["isCorrect"]) for a in body["answers"]] == [("1013.25 hPa", True), ("1000 hPa", False)]
    assert all(a["questionId"] == body["id"] for a in body["answers"])


def test_create_validation(client, make, tree):
    smid = tree["sub_modules"]["pressure"]
    before = make.count(Question)
    cases = [
        (_payload(smid, text=""), 400, "Question text is required"),
        (_payload(None), 400, "SubModule ID is required"),
        (_payload(smid, answers=None), 400, "At least two answers are required"),
        (_payload(smid, answers=[{"text": "only", "isCorrect": True}]), 400, "At least two answers are required"),
        (_payload(smid, answers=[{"text": "a"}, {"text": "b", "isCorrect": False}]), 400,
         "At least one answer must be marked as correct"),
        (_payload("abc"), 400, "Invalid submodule ID"),
        (_payload(999), 404, "SubModule not found"),
    ]
    for payload, status, message in cases:
        r = client.post("/api/questions", json=payload)
        assert (r.status_code, r.json()["error"]) == (status, message)
    assert make.count(Question) == before


def test_update_replaces_answers(client, make, tree):
    qid = tree["questions"]["icing"][0]
    answers_before = make.count(Answer)
    r = client.put(f"/api/questions/{qid}", json={
        "text": "Rewritten",
        "answers": [{"text": "x", "isCorrect": False}, {"text": "y", "isCorrect": True}, {"text": "z"}],
    })
    assert r.status_code == 200
    assert r.json()["text"] == "Rewritten"
    assert [a["text"] for a in r.json()["answers"]] == ["x", "y", "z"]
    assert make.count(Answer) == answers_before + 1


def test_update_without_answers_keeps_them(client, tree):
    qid = tree["questions"]["icing"][0]
    r = client.put(f"/api/questions/{qid}", json={"text": "Only text", "subModuleId": tree["sub_modules"]["stall"]})
    assert r.status_code == 200
    assert r.json()["subModuleId"] == tree["sub_modules"]["stall"]
    assert len(r.json()["answers"]) == 2


def test_update_rejects_bad_answers(client, tree):
    qid = tree["questions"]["icing"][0]
    r = client.put(f"/api/questions/{qid}", json={"text": "t", "answers": [{"text": "a"}, {"text": "b"}]})
    assert r.status_code == 400
    r = client.put(f"/api/questions/{qid}", json={"answers": [{"text": "a", "isCorrect": True}, {"text": "b"}]})
    assert r.json()["error"] == "Question text is required"
    assert client.put("/api/questions/999", json={"text": "t"}).status_code == 404


def test_detail_embeds_parents(client, tree):
    body = client.get(f"/api/questions/{tree['questions']['stall'][0]}").json()
    assert body["subModule"]["module"]["subject"]["name"] == "Aviation ATPL"
    assert len(body["answers"]) == 2


def test_list_search_and_parent_filter(client, tree):
    body = client.get(f"/api/questions?subModuleId={tree['sub_modules']['stall']}&pageSize=2").json()
    assert (body["total"], body["totalPages"], len(body["data"])) == (4, 2, 2)

    by_text = client.get("/api/questions?search=PRESSURE QUESTION").json()
    assert by_text["total"] == 2
    by_subject = client.get("/api/questions?search=maritime").json()
    assert {q["text"] for q in by_subject["data"]} == {f"Charts question {i}" for i in range(3)}
    by_module = client.get("/api/questions?search=principles").json()
    assert by_module["total"] == 4


def test_delete_question_removes_answers(client, make, tree):
    r = client.delete(f"/api/questions/{tree['questions']['charts'][0]}")
    assert r.json() == {"message": "Question deleted successfully"}
    assert make.count(Question) == 11
    assert make.count(Answer) == 22


def test_failed_write_leaves_no_partial_question(settings, store, make, tree, monkeypatch):
    def broken_answers(answers):
        built = Answer(text=answers[0].text, is_correct=True)
        return [built, Answer(text=None, is_correct=False)]

    monkeypatch.setattr(questions_api, "build_answers", broken_answers)
    before = (make.count(Question), make.count(Answer))
    with TestClient(create_app(settings, store), raise_server_exceptions=False) as c:
        c.post("/api/auth/login", json={"username": "raptor", "password": "0424"})
        r = c.post("/api/questions", json=_payload(tree["sub_modules"]["pressure"]))
        assert r.status_code == 500
        assert (make.count(Question), make.count(Answer)) == before
