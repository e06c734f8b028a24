"""
Tests for comments, badges and reactions.
"""
import pytest
from sqlalchemy import func, select

from catalog.core.exceptions import DuplicateReactionError, NotFoundError, ValidationError
from catalog.core.security import create_access_token
from catalog.models.database import BadgeType, CommentBadge, CommentReaction
from catalog.services.reactions import parse_reaction_type, reaction_service


async def _reaction_rows(db, comment_id):
    result = await db.execute(select(func.count(CommentReaction.id)).where(CommentReaction.comment_id == comment_id))
    return result.scalar_one()


@pytest.mark.unit
class TestComments:

    async def test_post_comment(self, client, auth_headers, username, make_product):
        product = await make_product()

        response = await client.post(
            f"/api/data-products/{product.id}/comments",
            json={"content": "  Schema docs are excellent  "},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["comment"]["authorName"] == username
        assert data["comment"]["content"] == "Schema docs are excellent"
        assert data["comment"]["reactions"] == {"like": 0, "helpful": 0, "insightful": 0}
        assert data["comment"]["badges"] == []
        assert data["metrics"]["totalComments"] == 1

    async def test_total_comments_counts_only_this_product(self, client, auth_headers, make_product, make_comment):
        product = await make_product()
        other = await make_product(name="Trade Data", tags=["trades"])
        await make_comment(other.id)
        await make_comment(product.id)

        response = await client.post(
            f"/api/data-products/{product.id}/comments", json={"content": "Second"}, headers=auth_headers
        )

        assert response.json()["metrics"]["totalComments"] == 2

    async def test_post_requires_authentication(self, client, make_product):
        product = await make_product()

        response = await client.post(f"/api/data-products/{product.id}/comments", json={"content": "Hi"})

        assert response.status_code == 401

    async def test_empty_content_returns_400(self, client, auth_headers, make_product):
        product = await make_product()

        response = await client.post(
            f"/api/data-products/{product.id}/comments", json={"content": ""}, headers=auth_headers
        )

        assert response.status_code == 400

    async def test_comment_on_unknown_product_returns_404(self, client, auth_headers):
        response = await client.post("/api/data-products/77/comments", json={"content": "Hi"}, headers=auth_headers)

        assert response.status_code == 404

    async def test_list_newest_first_with_badges(self, client, db, make_product, make_comment):
        product = await make_product()
        older = await make_comment(product.id, content="First")
        newer = await make_comment(product.id, content="Second")
        db.add(CommentBadge(comment_id=older.id, type=BadgeType.QUALITY))
        await db.commit()

        response = await client.get(f"/api/data-products/{product.id}/comments")

        assert response.status_code == 200
        comments = response.json()
        assert [comment["id"] for comment in comments] == [newer.id, older.id]
        assert comments[0]["badges"] == []
        assert [badge["type"] for badge in comments[1]["badges"]] == ["quality"]


@pytest.mark.unit
class TestReactionService:
    """At most one reaction per (comment, type, user)."""

    async def test_counters_follow_recorded_reactions(self, db, make_product, make_comment):
        product = await make_product()
        comment = await make_comment(product.id)

        await reaction_service.add_reaction(db, comment.id, "like", "analyst")
        await reaction_service.add_reaction(db, comment.id, "like", "engineer")
        counts = await reaction_service.add_reaction(db, comment.id, "helpful", "analyst")

        assert counts == {"like": 2, "helpful": 1, "insightful": 0}
        assert await _reaction_rows(db, comment.id) == 3

    async def test_duplicate_leaves_counter_unchanged(self, db, make_product, make_comment):
        product = await make_product()
        comment = await make_comment(product.id)
        comment_id = comment.id
        await reaction_service.add_reaction(db, comment_id, "insightful", "analyst")

        with pytest.raises(DuplicateReactionError):
            await reaction_service.add_reaction(db, comment_id, "insightful", "analyst")

        counts = await reaction_service.add_reaction(db, comment_id, "like", "analyst")
        assert counts == {"like": 1, "helpful": 0, "insightful": 1}
        assert await _reaction_rows(db, comment_id) == 2

    async def test_unknown_comment(self, db):
        with pytest.raises(NotFoundError):
            await reaction_service.add_reaction(db, 12345, "like", "analyst")

    @pytest.mark.parametrize("value", ["love", "", "LIKE"])
    def test_invalid_reaction_type(self, value):
        with pytest.raises(ValidationError):
            parse_reaction_type(value)


@pytest.mark.unit
class TestReactionEndpoint:

    async def test_react_uses_token_identity(self, client, db, auth_headers, username, make_product, make_comment):
        product = await make_product()
        comment = await make_comment(product.id)

        response = await client.post(
            f"/api/comments/{comment.id}/reactions", json={"type": "helpful"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"reactions": {"like": 0, "helpful": 1, "insightful": 0}}
        result = await db.execute(select(CommentReaction.user_identifier).where(CommentReaction.comment_id == comment.id))
        assert result.scalars().all() == [username]

    async def test_duplicate_returns_409(self, client, auth_headers, make_product, make_comment):
        product = await make_product()
        comment = await make_comment(product.id)
        url = f"/api/comments/{comment.id}/reactions"

        await client.post(url, json={"type": "like"}, headers=auth_headers)
        response = await client.post(url, json={"type": "like"}, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "DuplicateReaction"
        comments = (await client.get(f"/api/data-products/{product.id}/comments")).json()
        assert comments[0]["reactions"]["like"] == 1

    async def test_different_users_may_react_with_same_type(self, client, auth_headers, make_product, make_comment):
        product = await make_product()
        comment = await make_comment(product.id)
        url = f"/api/comments/{comment.id}/reactions"
        other_headers = {"Authorization": f"Bearer {create_access_token('analyst')}"}

        await client.post(url, json={"type": "like"}, headers=auth_headers)
        response = await client.post(url, json={"type": "like"}, headers=other_headers)

        assert response.status_code == 200
        assert response.json()["reactions"]["like"] == 2

    async def test_invalid_type_returns_400(self, client, auth_headers, make_product, make_comment):
        product = await make_product()
        comment = await make_comment(product.id)

        response = await client.post(
            f"/api/comments/{comment.id}/reactions", json={"type": "love"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    async def test_requires_authentication(self, client, make_product, make_comment):
        product = await make_product()
        comment = await make_comment(product.id)

        response = await client.post(f"/api/comments/{comment.id}/reactions", json={"type": "like"})

        assert response.status_code == 401
