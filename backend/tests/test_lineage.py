"""
Tests for lineage graphs, the default chain and stored versions.
"""
import pytest
from sqlalchemy import func, select

from catalog.models.database import LineageNode, LineageVersion
from catalog.services.lineage import lineage_service


async def _node_count(db, product_id):
    result = await db.execute(select(func.count(LineageNode.id)).where(LineageNode.data_product_id == product_id))
    return result.scalar_one()


@pytest.mark.unit
class TestDefaultChain:
    """A product without lineage gets source -> transformation -> target."""

    async def test_first_read_creates_chain(self, client, make_product):
        product = await make_product(name="Reference Data")

        response = await client.get(f"/api/lineage/{product.id}")

        assert response.status_code == 200
        graph = response.json()
        assert [node["type"] for node in graph["nodes"]] == ["source", "transformation", "target"]
        assert [node["label"] for node in graph["nodes"]] == ["Source System", "Data Processing", "Reference Data"]
        ids = [node["id"] for node in graph["nodes"]]
        assert all(isinstance(node_id, str) for node_id in ids)
        assert graph["links"] == [
            {"source": ids[0], "target": ids[1]},
            {"source": ids[1], "target": ids[2]},
        ]

    async def test_second_read_returns_same_graph(self, client, db, make_product):
        product = await make_product()

        first = (await client.get(f"/api/lineage/{product.id}")).json()
        second = (await client.get(f"/api/lineage/{product.id}")).json()

        assert first == second
        assert await _node_count(db, product.id) == 3

    async def test_chain_is_recorded_as_version_one(self, client, make_product):
        product = await make_product()
        graph = (await client.get(f"/api/lineage/{product.id}")).json()

        versions = (await client.get(f"/api/lineage/{product.id}/versions")).json()

        assert [version["version"] for version in versions] == [1]
        assert versions[0]["snapshot"] == graph
        assert versions[0]["createdBy"] == "system"

    async def test_losing_writer_leaves_graph_to_the_winner(self, db, make_product, monkeypatch):
        product = await make_product()
        product_id = product.id
        db.add(LineageVersion(data_product_id=product_id, version=1, snapshot={"nodes": [], "links": []}))
        await db.commit()

        async def stale_next_version(session, pid):
            return 1

        monkeypatch.setattr(lineage_service, "_next_version", stale_next_version)

        assert await lineage_service.ensure_default_chain(db, product) is False
        assert await _node_count(db, product_id) == 0

    async def test_second_writer_after_committed_chain_writes_nothing(self, db, make_product):
        product = await make_product()
        product_id = product.id

        assert await lineage_service.ensure_default_chain(db, product) is True
        assert await lineage_service.ensure_default_chain(db, product) is False

        graph = await lineage_service.get_graph(db, product_id)
        assert await _node_count(db, product_id) == 3
        assert len(graph["links"]) == 2
        versions = await lineage_service.list_versions(db, product_id)
        assert [version.version for version in versions] == [1]

    async def test_existing_lineage_is_not_replaced(self, client, make_product):
        product = await make_product()
        response = await client.post(
            f"/api/lineage/{product.id}/nodes",
            json={"type": "source", "details": {"name": "Bloomberg"}},
        )
        assert response.status_code == 201

        graph = (await client.get(f"/api/lineage/{product.id}")).json()

        assert graph["nodes"] == [{"id": str(response.json()["id"]), "type": "source", "label": "Bloomberg"}]
        assert graph["links"] == []

    async def test_unknown_product_returns_404(self, client):
        response = await client.get("/api/lineage/4242")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    async def test_non_integer_id_returns_400(self, client):
        response = await client.get("/api/lineage/not-a-number")

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


@pytest.mark.unit
class TestLineageEditing:

    async def test_add_edge_between_nodes(self, client, make_product):
        product = await make_product()
        source = (await client.post(
            f"/api/lineage/{product.id}/nodes", json={"type": "source", "details": {"name": "Exchange Feed"}}
        )).json()
        target = (await client.post(
            f"/api/lineage/{product.id}/nodes", json={"type": "target", "details": {"name": "Market Data"}}
        )).json()

        response = await client.post(
            "/api/lineage/edges",
            json={"sourceId": source["id"], "targetId": target["id"], "transformationLogic": "normalise prices"},
        )

        assert response.status_code == 201
        assert response.json()["transformationLogic"] == "normalise prices"
        graph = (await client.get(f"/api/lineage/{product.id}")).json()
        assert graph["links"] == [{"source": str(source["id"]), "target": str(target["id"])}]

    async def test_add_edge_to_missing_node_returns_404(self, client, make_product):
        product = await make_product()
        source = (await client.post(f"/api/lineage/{product.id}/nodes", json={"type": "source"})).json()

        response = await client.post("/api/lineage/edges", json={"sourceId": source["id"], "targetId": 999})

        assert response.status_code == 404

    async def test_invalid_node_type_returns_400(self, client, make_product):
        product = await make_product()

        response = await client.post(f"/api/lineage/{product.id}/nodes", json={"type": "sink"})

        assert response.status_code == 400


@pytest.mark.unit
class TestLineageVersions:

    async def test_save_version_requires_authentication(self, client, make_product):
        product = await make_product()

        response = await client.post(f"/api/lineage/{product.id}/versions", json={"changeMessage": "snapshot"})

        assert response.status_code == 401

    async def test_saved_versions_are_numbered_and_retrievable(self, client, auth_headers, username, make_product):
        product = await make_product()
        default_graph = (await client.get(f"/api/lineage/{product.id}")).json()
        await client.post(f"/api/lineage/{product.id}/nodes", json={"type": "target", "details": {"name": "Report"}})

        response = await client.post(
            f"/api/lineage/{product.id}/versions",
            json={"changeMessage": "Added report"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        saved = response.json()
        assert saved["version"] == 2
        assert saved["createdBy"] == username
        assert len(saved["snapshot"]["nodes"]) == 4

        versions = (await client.get(f"/api/lineage/{product.id}/versions")).json()
        assert [version["version"] for version in versions] == [2, 1]

        old = (await client.get(f"/api/lineage/{product.id}", params={"version": 1})).json()
        assert old == default_graph

    async def test_unknown_version_returns_404(self, client, make_product):
        product = await make_product()

        response = await client.get(f"/api/lineage/{product.id}", params={"version": 7})

        assert response.status_code == 404

