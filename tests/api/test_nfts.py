import pytest
from fastapi import status
from fastapi.testclient import TestClient

from app.models.nfts import Collection, Nft
from app.models.users import User, UserProfile


@pytest.fixture
def catalogue(db_session):
    """Two users, one collection and three NFTs"""
    creator = User(email="maker@example.com")
    owner = User(email="owner@example.com")
    db_session.add_all([creator, owner])
    db_session.flush()
    db_session.add_all(
        [
            UserProfile(user_id=creator.id, public_username="maker"),
            UserProfile(user_id=owner.id, public_username="collector"),
        ]
    )
    collection = Collection(name="Summer Drop")
    db_session.add(collection)
    db_session.flush()
    db_session.add_all(
        [
            Nft(
                token_id="1",
                name="Blue Tee",
                description="Cotton tee in blue",
                image_url="ipfs://blue",
                price=0.05,
                creator_id=creator.id,
                owner_id=owner.id,
                collection_id=collection.id,
                on_chain_status="MINTED",
                metadata_url="ipfs://blue-meta",
            ),
            Nft(token_id="2", name="Red Hoodie", description="Warm", price=0.1, creator_id=creator.id),
            Nft(token_id="3", name="Mystery", description="A BLUE surprise"),
        ]
    )
    db_session.commit()
    return {"creator_id": creator.id, "owner_id": owner.id}


class TestListNftsAPI:
    """Test cases for GET /api/nfts"""

    def test_list_all(self, client: TestClient, catalogue):
        response = client.get("/api/nfts")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["pagination"] == {"total": 3, "limit": 20, "offset": 0}
        by_token = {nft["tokenId"]: nft for nft in data["nfts"]}
        assert by_token["1"]["creator"] == {"nickname": "maker"}
        assert by_token["1"]["imageUrl"] == "ipfs://blue"
        assert by_token["3"]["creator"] == {"nickname": "Unknown"}

    def test_list_pagination(self, client: TestClient, catalogue):
        response = client.get("/api/nfts", params={"limit": 2, "offset": 2})

        data = response.json()
        assert len(data["nfts"]) == 1
        assert data["pagination"]["total"] == 3

    def test_list_empty(self, client: TestClient):
        response = client.get("/api/nfts")
        assert response.json() == {"nfts": [], "pagination": {"total": 0, "limit": 20, "offset": 0}}


class TestSearchNftsAPI:
    """Test cases for GET /api/nfts/search"""

    def test_search_matches_name_and_description(self, client: TestClient, catalogue):
        response = client.get("/api/nfts/search", params={"q": "blue"})

        assert response.status_code == status.HTTP_200_OK
        tokens = sorted(nft["tokenId"] for nft in response.json()["nfts"])
        assert tokens == ["1", "3"]

    def test_search_empty_query(self, client: TestClient, catalogue):
        response = client.get("/api/nfts/search")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["nfts"] == []


class TestNftDetailAPI:
    """Test cases for GET /api/nfts/{token_id}"""

    def test_detail(self, client: TestClient, catalogue):
        response = client.get("/api/nfts/1")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["tokenId"] == "1"
        assert data["collection"] == {"name": "Summer Drop"}
        assert data["creator"] == {"nickname": "maker"}
        assert data["owner"] == {"nickname": "collector"}
        assert data["metadata_url"] == "ipfs://blue-meta"
        assert data["has_warning"] is False

    def test_detail_fallbacks(self, client: TestClient, catalogue):
        data = client.get("/api/nfts/3").json()

        assert data["collection"] == {"name": "N/A"}
        assert data["creator"] == {"nickname": "Unknown"}
        assert data["owner"] == {"nickname": "Unknown"}

    def test_detail_not_found(self, client: TestClient, catalogue):
        response = client.get("/api/nfts/999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "NFT with tokenId 999 not found."
