"""
Tests for the idea repository: creation, validation, edit/delete rules,
listing filters, search and pagination.
"""

from datetime import datetime

import pytest

from featureboard.core.errors import Forbidden, NotFound, ValidationError
from featureboard.models.comment import Comment
from featureboard.models.idea import Idea, IdeaStatus
from featureboard.models.vote import Vote
from featureboard.schemas.idea import IdeaCreate, IdeaUpdate
from featureboard.services import idea_service
from featureboard.services.comment_service import add_comment
from featureboard.services.vote_service import vote


# =============================================================================
# Create
# =============================================================================

def test_new_idea_starts_private(db_session, alice):
    idea = idea_service.create_idea(
        IdeaCreate(title="  Dark mode  ", description="Please add a dark theme for late nights."),
        alice, db_session
    )

    assert idea.title == "Dark mode"
    assert idea.status == IdeaStatus.PRIVATE.value
    assert idea.is_public is False
    assert idea.vote_count == 0
    assert idea.comment_count == 0
    assert idea.author_id == alice["id"]
    assert idea.author_name == "Alice Tester"


@pytest.mark.parametrize("title", ["", "   ", "x" * 101])
def test_title_bounds(db_session, alice, title):
    with pytest.raises(ValidationError):
        idea_service.create_idea(IdeaCreate(title=title, description="Long enough description"), alice, db_session)
    assert db_session.query(Idea).count() == 0


@pytest.mark.parametrize("description", ["too short", "   padded   ", "y" * 2001])
def test_description_bounds(db_session, alice, description):
    with pytest.raises(ValidationError):
        idea_service.create_idea(IdeaCreate(title="Title", description=description), alice, db_session)


def test_exact_length_limits_accepted(db_session, alice):
    idea = idea_service.create_idea(
        IdeaCreate(title="t" * 100, description="d" * 10), alice, db_session
    )
    assert len(idea.title) == 100


# =============================================================================
# Get
# =============================================================================

def test_hidden_idea_reported_as_not_found(db_session, alice, bob, admin, make_idea):
    idea = make_idea(alice)

    with pytest.raises(NotFound):
        idea_service.get_idea(idea.id, bob, db_session)
    assert idea_service.get_idea(idea.id, alice, db_session).id == idea.id
    assert idea_service.get_idea(idea.id, admin, db_session).id == idea.id


def test_missing_idea_not_found(db_session, alice):
    with pytest.raises(NotFound):
        idea_service.get_idea("missing", alice, db_session)


# =============================================================================
# Update
# =============================================================================

def test_author_edits_private_idea(db_session, alice, make_idea):
    idea = make_idea(alice)
    updated = idea_service.update_idea(idea.id, IdeaUpdate(title="Sharper title"), alice, db_session)

    assert updated.title == "Sharper title"
    assert updated.updated_at > updated.created_at


def test_author_cannot_edit_after_approval(db_session, alice, make_idea):
    idea = make_idea(alice, status=IdeaStatus.NEEDS_REVIEW.value, is_public=True)

    with pytest.raises(Forbidden):
        idea_service.update_idea(idea.id, IdeaUpdate(title="Too late"), alice, db_session)


def test_other_client_cannot_edit(db_session, alice, bob, make_idea):
    idea = make_idea(alice, status=IdeaStatus.NEEDS_REVIEW.value, is_public=True)

    with pytest.raises(Forbidden):
        idea_service.update_idea(idea.id, IdeaUpdate(title="Mine now"), bob, db_session)


def test_client_cannot_touch_admin_fields(db_session, alice, make_idea):
    idea = make_idea(alice)

    with pytest.raises(Forbidden):
        idea_service.update_idea(idea.id, IdeaUpdate(is_public=True), alice, db_session)
    with pytest.raises(Forbidden):
        idea_service.update_idea(idea.id, IdeaUpdate(status=IdeaStatus.PLANNED), alice, db_session)


def test_admin_status_change_stamps_last_status_update(db_session, alice, admin, make_idea):
    idea = make_idea(alice)
    before = idea.last_status_update

    updated = idea_service.update_idea(
        idea.id, IdeaUpdate(status=IdeaStatus.PLANNED, is_pinned=True), admin, db_session
    )

    assert updated.status == IdeaStatus.PLANNED.value
    assert updated.is_pinned is True
    assert updated.last_status_update > before


def test_update_still_validates_lengths(db_session, alice, make_idea):
    idea = make_idea(alice)
    with pytest.raises(ValidationError):
        idea_service.update_idea(idea.id, IdeaUpdate(description="short"), alice, db_session)


# =============================================================================
# Delete
# =============================================================================

def test_author_deletes_private_idea(db_session, alice, make_idea):
    idea = make_idea(alice)
    idea_service.delete_idea(idea.id, alice, db_session)
    assert db_session.get(Idea, idea.id) is None


def test_author_cannot_delete_public_idea(db_session, alice, make_idea):
    idea = make_idea(alice, status=IdeaStatus.NEEDS_REVIEW.value, is_public=True)
    with pytest.raises(Forbidden):
        idea_service.delete_idea(idea.id, alice, db_session)


def test_admin_delete_removes_votes_and_comments(db_session, alice, bob, admin, make_idea):
    idea = make_idea(alice, status=IdeaStatus.NEEDS_REVIEW.value, is_public=True)
    vote(idea.id, bob, db_session)
    add_comment(idea.id, "Great idea", None, bob, db_session)

    idea_service.delete_idea(idea.id, admin, db_session)

    assert db_session.query(Vote).filter(Vote.idea_id == idea.id).count() == 0
    assert db_session.query(Comment).filter(Comment.idea_id == idea.id).count() == 0


# =============================================================================
# Listing
# =============================================================================

def test_list_applies_visibility(db_session, alice, bob, admin, make_idea):
    mine = make_idea(bob)
    public = make_idea(alice, status=IdeaStatus.PLANNED.value, is_public=True)
    make_idea(alice)
    rejected = make_idea(alice, status=IdeaStatus.WONT_IMPLEMENT.value, is_public=True)

    bob_sees = {i.id for i in idea_service.list_ideas(bob, db_session)}
    assert bob_sees == {mine.id, public.id}

    assert len(idea_service.list_ideas(admin, db_session)) == 4
    assert rejected.id in {i.id for i in idea_service.list_ideas(alice, db_session)}


def test_private_idea_listed_for_author_and_admins_only(db_session, make_viewer, alice, admin, make_idea):
    idea = make_idea(alice)
    second_admin = make_viewer("Root", role="admin")

    for viewer in (alice, admin, second_admin):
        assert idea.id in {i.id for i in idea_service.list_ideas(viewer, db_session)}
    for n in range(3):
        other = make_viewer(f"Other{n}")
        assert idea.id not in {i.id for i in idea_service.list_ideas(other, db_session)}


def test_anonymous_list_is_empty(db_session, alice, make_idea):
    make_idea(alice, status=IdeaStatus.PLANNED.value, is_public=True)
    assert idea_service.list_ideas(None, db_session) == []


def test_list_status_and_author_filters(db_session, alice, bob, make_idea):
    planned = make_idea(alice, status=IdeaStatus.PLANNED.value, is_public=True)
    make_idea(bob, status=IdeaStatus.COMPLETED.value, is_public=True)

    assert [i.id for i in idea_service.list_ideas(bob, db_session, status="planned")] == [planned.id]
    assert [i.id for i in idea_service.list_ideas(bob, db_session, author_id=alice["id"])] == [planned.id]


def test_client_filtering_wont_implement_is_forbidden(db_session, bob):
    with pytest.raises(Forbidden):
        idea_service.list_ideas(bob, db_session, status="wont_implement")


def test_search_matches_title_or_description_case_insensitive(db_session, alice, make_idea):
    by_title = make_idea(alice, title="Export to CSV")
    by_description = make_idea(alice, description="Support csv uploads in bulk please.")
    make_idea(alice, title="Unrelated")

    found = {i.id for i in idea_service.list_ideas(alice, db_session, search="csv")}
    assert found == {by_title.id, by_description.id}


@pytest.mark.parametrize("term,expected", [("100%", "Guarantee 100% uptime"), ("snake_case", "Use snake_case keys")])
def test_search_wildcards_are_literal(db_session, alice, make_idea, term, expected):
    make_idea(alice, title="Support 100 percent uptime")
    make_idea(alice, title="Use snakeXcase keys")
    make_idea(alice, title="Guarantee 100% uptime")
    make_idea(alice, title="Use snake_case keys")

    found = [i.title for i in idea_service.list_ideas(alice, db_session, search=term)]
    assert found == [expected]


def test_pagination(db_session, alice, make_idea):
    ideas = [make_idea(alice) for _ in range(5)]
    newest_first = [i.id for i in reversed(ideas)]

    page = idea_service.list_ideas(alice, db_session, limit=2, offset=1)
    assert [i.id for i in page] == newest_first[1:3]


@pytest.mark.parametrize("limit,offset", [(0, 0), (101, 0), (10, -1)])
def test_pagination_bounds(db_session, alice, limit, offset):
    with pytest.raises(ValidationError):
        idea_service.list_ideas(alice, db_session, limit=limit, offset=offset)


def test_list_sorted_popular(db_session, alice, make_idea):
    low = make_idea(alice, vote_count=1)
    high = make_idea(alice, vote_count=9)

    assert [i.id for i in idea_service.list_ideas(alice, db_session, sort_by="popular")] == [high.id, low.id]


def test_my_ideas_include_every_status(db_session, alice, bob, make_idea):
    make_idea(alice)
    make_idea(alice, status=IdeaStatus.WONT_IMPLEMENT.value, is_public=True)
    make_idea(bob)

    assert len(idea_service.list_my_ideas(alice, db_session)) == 2


def test_pinned_ideas_respect_visibility(db_session, alice, bob, make_idea):
    visible = make_idea(alice, status=IdeaStatus.PLANNED.value, is_public=True, is_pinned=True)
    make_idea(alice, is_pinned=True)
    make_idea(alice, status=IdeaStatus.PLANNED.value, is_public=True)

    assert [i.id for i in idea_service.list_pinned_ideas(bob, db_session)] == [visible.id]
    assert len(idea_service.list_pinned_ideas(alice, db_session)) == 2


def test_created_idea_appears_first_for_author(db_session, alice, make_idea):
    make_idea(alice, created_at=datetime(2023, 1, 1))
    idea = idea_service.create_idea(
        IdeaCreate(title="Fresh", description="A brand new suggestion."), alice, db_session
    )
    assert idea_service.list_ideas(alice, db_session)[0].id == idea.id
