# flake8: noqa
import base64
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from swiftbites import app as app_module
from swiftbites.store import EntityStore


@pytest.fixture
def client(store):
    app_module.app.dependency_overrides[app_module.provide_store] = lambda: store
    yield TestClient(app_module.app)
    app_module.app.dependency_overrides.clear()


def create_recipe(client, name, **fields):
    payload = {"name": name, "serving_count": 2, "time_minutes": 20}
    payload.update(fields)
    res = client.post("/api/recipes", json=payload)
    assert res.status_code == 200
    return res.json()


def test_category_crud(client):
    res = client.post("/api/categories", json={"name": "Italian"})
    assert res.status_code == 200
    cid = res.json()["id"]

    res = client.get(f"/api/categories/{cid}")
    assert res.status_code == 200
    assert res.json() == {"id": cid, "name": "Italian", "recipes": []}

    res = client.put(f"/api/categories/{cid}", json={"name": "Italiano"})
    assert res.status_code == 200
    assert res.json()["name"] == "Italiano"

    res = client.delete(f"/api/categories/{cid}")
    assert res.status_code == 200
    assert res.json().get("deleted") is True
    assert client.get("/api/categories").json() == []


def test_duplicate_names_conflict(client):
    assert client.post("/api/ingredients", json={"name": "Salt"}).status_code == 200
    res = client.post("/api/ingredients", json={"name": "Salt"})
    assert res.status_code == 409
    assert res.json()["detail"] == "Ingredient with the same name exists"

    create_recipe(client, "Pizza")
    res = client.post("/api/recipes", json={"name": "Pizza", "serving_count": 1, "time_minutes": 5})
    assert res.status_code == 409


def test_unknown_ids(client):
    # updates report a missing id, deletes quietly succeed
    res = client.put("/api/ingredients/missing", json={"name": "Salt"})
    assert res.status_code == 404
    res = client.get("/api/recipes/missing")
    assert res.status_code == 404
    res = client.delete("/api/recipes/missing")
    assert res.status_code == 200
    assert res.json() == {"deleted": True}


def test_missing_name_validation(client):
    res = client.post("/api/recipes", json={"serving_count": 1, "time_minutes": 5})
    assert res.status_code == 422
    res = client.post("/api/recipes", json={"name": "Soup", "serving_count": 0, "time_minutes": 5})
    assert res.status_code == 422
    res = client.post("/api/categories", json={"name": "  "})
    assert res.status_code == 422


def test_recipe_json_structure(client):
    cid = client.post("/api/categories", json={"name": "Italian"}).json()["id"]
    iid = client.post("/api/ingredients", json={"name": "Spaghetti"}).json()["id"]
    obj = create_recipe(
        client,
        "Carbonara",
        summary="Eggs, cheese and pancetta",
        category_id=cid,
        ingredients=[{"ingredient_id": iid, "quantity": "400g"}],
        instructions="Cook spaghetti.",
    )

    assert obj["category"] == {"id": cid, "name": "Italian"}
    assert obj["ingredients"][0]["ingredient"] == {"id": iid, "name": "Spaghetti"}
    assert obj["ingredients"][0]["quantity"] == "400g"
    assert obj["image_data"] is None

    category = client.get(f"/api/categories/{cid}").json()
    assert category["recipes"] == [{"id": obj["id"], "name": "Carbonara"}]


def test_delete_category_keeps_recipe(client):
    cid = client.post("/api/categories", json={"name": "Italian"}).json()["id"]
    rid = create_recipe(client, "Pizza", category_id=cid)["id"]

    client.delete(f"/api/categories/{cid}")

    res = client.get(f"/api/recipes/{rid}")
    assert res.status_code == 200
    assert res.json()["category"] is None


def test_search_api(client):
    create_recipe(client, "Apple Pie", summary="Sweet and tart")
    create_recipe(client, "Banana Bread", summary="Moist loaf")
    create_recipe(client, "Cherry Tart", summary="Summer dessert")

    res = client.get("/api/recipes?q=banana")
    assert res.status_code == 200
    assert [r["name"] for r in res.json()] == ["Banana Bread"]

    res = client.get("/api/recipes?q=tart")
    assert [r["name"] for r in res.json()] == ["Apple Pie", "Cherry Tart"]

    client.post("/api/ingredients", json={"name": "Basil"})
    client.post("/api/ingredients", json={"name": "Black Pepper"})
    res = client.get("/api/ingredients?q=BA")
    assert [i["name"] for i in res.json()] == ["Basil"]


def test_recipe_order(client):
    create_recipe(client, "Stew", serving_count=6, time_minutes=120)
    create_recipe(client, "Salad", serving_count=2, time_minutes=10)
    create_recipe(client, "Omelette", serving_count=1, time_minutes=10)

    names = lambda order: [r["name"] for r in client.get(f"/api/recipes?order={order}").json()]
    assert names("name") == ["Omelette", "Salad", "Stew"]
    assert names("serving_desc") == ["Stew", "Salad", "Omelette"]
    assert names("time_asc") == ["Omelette", "Salad", "Stew"]
    assert client.get("/api/recipes?order=rating").status_code == 422


def test_detached_store_is_unavailable():
    app_module.app.dependency_overrides[app_module.provide_store] = lambda: EntityStore()
    try:
        res = TestClient(app_module.app).get("/api/recipes")
        assert res.status_code == 503
        assert res.json()["detail"] == "No backing store attached"
    finally:
        app_module.app.dependency_overrides.clear()


class FailingCommitSession(Session):
    def commit(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))


def test_failed_commit_is_service_unavailable(engine, client):
    failing = EntityStore(
        sessionmaker(bind=engine, autoflush=False, class_=FailingCommitSession)
    )
    app_module.app.dependency_overrides[app_module.provide_store] = lambda: failing
    res = client.post("/api/categories", json={"name": "Italian"})
    assert res.status_code == 503
    assert "disk I/O error" in res.json()["detail"]


def test_concurrent_duplicate_posts_conflict(client):
    def post(_):
        return client.post("/api/categories", json={"name": "Italian"}).status_code

    with ThreadPoolExecutor(max_workers=8) as pool:
        statuses = sorted(pool.map(post, range(8)))

    assert statuses == [200] + [409] * 7
    assert [c["name"] for c in client.get("/api/categories").json()] == ["Italian"]


def test_image_data_round_trips_as_base64(client, store):
    image = b"\x89PNG\r\n\x1a\n\x00\xff"
    encoded = base64.b64encode(image).decode("ascii")
    obj = create_recipe(client, "Focaccia", image_data=encoded)
    assert obj["image_data"] == encoded

    assert client.get(f"/api/recipes/{obj['id']}").json()["image_data"] == encoded
    assert store.get_recipe(obj["id"]).image_data == image


def test_image_data_must_be_base64(client):
    res = client.post(
        "/api/recipes",
        json={"name": "Focaccia", "serving_count": 2, "time_minutes": 20, "image_data": "not base64!"},
    )
    assert res.status_code == 422
