from fastapi.testclient import TestClient

from nestedset.tree.nested_set import NestedSet


def test_get_tree(client: TestClient, tree: NestedSet):
    response = client.get("/api/tree")
    assert response.status_code == 200

    rows = response.json()
    assert [row["id"] for row in rows] == [f"{i}" for i in range(2, 12)]
    assert rows[0] == {"id": "2", "left": 2, "right": 13, "depth": 1}
    assert rows[-1] == {"id": "11", "left": 19, "right": 20, "depth": 2}


def test_empty_tree(client: TestClient):
    response = client.get("/api/tree")
    assert response.status_code == 200
    assert response.json() == []

    response = client.get("/api/tree/root")
    assert response.status_code == 404


def test_get_root(client: TestClient, tree: NestedSet):
    response = client.get("/api/tree/root")
    assert response.status_code == 200
    assert response.json() == {"id": "1"}


def test_get_node(client: TestClient, tree: NestedSet):
    response = client.get("/api/tree/3")
    assert response.status_code == 200
    assert response.json() == {"id": "3", "left": 3, "right": 8, "depth": 2, "size": 3, "parentId": "2"}

    response = client.get("/api/tree/1")
    assert response.json()["parentId"] is None


def test_get_missing_node(client: TestClient, tree: NestedSet):
    response = client.get("/api/tree/100")
    assert response.status_code == 404
    assert response.json()["detail"] == "Node 100 not found"

    response = client.get("/api/tree/abc")
    assert response.status_code == 400


def test_related_nodes(client: TestClient, tree: NestedSet):
    assert client.get("/api/tree/2/descendants").json() == {"id": "2", "nodes": ["3", "4", "5", "6", "7"]}
    assert client.get("/api/tree/5/ancestors").json()["nodes"] == ["1", "2", "3"]
    assert client.get("/api/tree/8/children").json()["nodes"] == ["9", "10", "11"]
    assert client.get("/api/tree/10/siblings").json()["nodes"] == ["9", "11"]

    assert client.get("/api/tree/2/cousins").status_code == 422
    assert client.get("/api/tree/100/children").status_code == 404


def test_insert_node(client: TestClient, tree: NestedSet):
    response = client.post("/api/tree", json={"label": "Tablets", "targetId": "2"})
    assert response.status_code == 201

    data = response.json()
    assert data["label"] == "Tablets"
    assert data["targetId"] == "2"
    assert data["position"] == "last_child"

    children = client.get("/api/tree/2/children").json()["nodes"]
    assert children == ["3", "6", data["id"]]


def test_insert_first_root(client: TestClient):
    response = client.post("/api/tree", json={"label": "Teach cats to use video chat"})
    assert response.status_code == 201

    root_id = response.json()["id"]
    assert client.get("/api/tree/root").json() == {"id": root_id}


def test_insert_invalid_position(client: TestClient, tree: NestedSet):
    response = client.post("/api/tree", json={"label": "Rival", "targetId": "1", "position": "before"})
    assert response.status_code == 400

    response = client.post("/api/tree", json={"label": "Orphan", "targetId": "100"})
    assert response.status_code == 404


def test_move_node_with_children(client: TestClient, tree: NestedSet):
    response = client.post("/api/tree/move", json={"sourceId": "3", "targetId": "8"})
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert client.get("/api/tree/8/children").json()["nodes"] == ["9", "10", "11", "3"]
    assert client.get("/api/tree/3/descendants").json()["nodes"] == ["4", "5"]
    assert client.get("/api/tree/3").json()["left"] == 15


def test_move_node_before_sibling(client: TestClient, tree: NestedSet):
    response = client.post("/api/tree/move", json={"sourceId": "11", "targetId": "9", "position": "before"})
    assert response.status_code == 200

    assert client.get("/api/tree/8/children").json()["nodes"] == ["11", "9", "10"]


def test_move_node_into_own_subtree(client: TestClient, tree: NestedSet):
    response = client.post("/api/tree/move", json={"sourceId": "2", "targetId": "7"})
    assert response.status_code == 400
    assert "inside the moved subtree" in response.json()["detail"]

    response = client.post("/api/tree/move", json={"sourceId": "2", "targetId": "100"})
    assert response.status_code == 404


def test_delete_node(client: TestClient, tree: NestedSet):
    response = client.delete("/api/tree/3")
    assert response.status_code == 200
    assert response.json() == {"deleted": 3}

    assert client.get("/api/tree/2/descendants").json()["nodes"] == ["6", "7"]
    assert client.get("/api/tree/1").json()["right"] == 16


def test_delete_missing_node(client: TestClient, tree: NestedSet):
    response = client.delete("/api/tree/100")
    assert response.status_code == 404
    assert tree.count() == 11


def test_bulk_load(client: TestClient):
    nodes = [
        {"id": "1", "label": "Plan the perfect weekend trip to Portland", "parentId": None},
        {"id": "2", "label": "Book flights", "parentId": "1"},
        {"id": "3", "label": "Reserve hotel", "parentId": "1"},
        {"id": "4", "label": "Pack luggage", "parentId": "3"},
    ]
    response = client.post("/api/tree/bulk", json=nodes)
    assert response.status_code == 201
    assert response.json() == {"created": 4}

    assert client.get("/api/tree").json() == [
        {"id": "2", "left": 2, "right": 3, "depth": 1},
        {"id": "3", "left": 4, "right": 7, "depth": 1},
        {"id": "4", "left": 5, "right": 6, "depth": 2},
    ]

    response = client.post("/api/tree/bulk", json=nodes)
    assert response.status_code == 400


def test_bulk_load_rejects_malformed_list(client: TestClient):
    nodes = [
        {"id": "1", "label": "Inbox", "parentId": None},
        {"id": "2", "label": "Archive", "parentId": None},
    ]
    response = client.post("/api/tree/bulk", json=nodes)
    assert response.status_code == 400
    assert "exactly one node without a parent" in response.json()["detail"]
    assert client.get("/api/tree").json() == []


def test_delete_all(client: TestClient, tree: NestedSet):
    response = client.delete("/api/tree")
    assert response.status_code == 204

    assert client.get("/api/tree").json() == []


def test_health(client: TestClient, tree: NestedSet):
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"]["database"]["connected"] is True
    assert data["checks"]["tree"] == {"tree": "healthy", "rootId": "1", "problems": []}
