"""Tests for database models."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlmodel import Session, select

from confirmable.core.current_user import acting_as
from confirmable.models import Episode, Script, User


class TestUserModel:
    """Tests for the User model."""

    def test_create_user(self, session: Session):
        """Test creating a user assigns an integer id."""
        user = User(name="Alice", email="alice@example.com")
        session.add(user)
        session.commit()

        retrieved = session.exec(select(User).where(User.email == "alice@example.com")).first()
        assert retrieved is not None
        assert isinstance(retrieved.id, int)
        assert retrieved.name == "Alice"

    def test_ids_are_sequential(self, user: User, other_user: User):
        """Test the fixtures get ids 1 and 2."""
        assert user.id == 1
        assert other_user.id == 2


class TestEpisodeModel:
    """Tests for the Episode model."""

    def test_create_episode(self, session: Session):
        """Test a new episode has no confirmed stage."""
        episode = Episode(title="Episode 1")
        session.add(episode)
        session.commit()

        retrieved = session.get(Episode, episode.id)
        assert retrieved.title == "Episode 1"
        assert retrieved.created_at is not None
        for name in Episode.confirmable_names():
            assert retrieved.is_confirmed(name) is False

    def test_confirmation_is_persisted(self, episode: Episode, user: User, session: Session):
        """Test a confirmation survives a reload."""
        with acting_as(user):
            episode.recorded = True
        session.add(episode)
        session.commit()
        session.expire_all()

        retrieved = session.get(Episode, episode.id)
        assert retrieved.recorded is True
        assert retrieved.recorded_confirmed_by == user.id
        assert retrieved.recorded_confirmer == user
        assert retrieved.produced is False

    def test_stored_timestamp(self, episode: Episode, session: Session):
        """Test an explicit timestamp is stored as given."""
        t0 = datetime(2024, 2, 1, 8, 15, tzinfo=UTC)
        episode.set_confirmed("edited", t0, actor=3)
        session.add(episode)
        session.commit()
        session.expire_all()

        retrieved = session.get(Episode, episode.id)
        assert retrieved.edited_confirmed_at == t0
        assert retrieved.edited_at == t0
        assert retrieved.edited_confirmed_by == 3

    def test_naive_timestamp_is_stored_as_utc(self, episode: Episode, session: Session):
        """Test a naive timestamp is saved and read back as UTC."""
        episode.edited = datetime(2024, 3, 5, 9, 0)
        session.add(episode)
        session.commit()
        session.expire_all()

        retrieved = session.get(Episode, episode.id)
        assert retrieved.edited_confirmed_at == datetime(2024, 3, 5, 9, 0, tzinfo=UTC)

    def test_unconfirm_is_persisted(self, episode: Episode, session: Session):
        """Test clearing a confirmation empties both columns."""
        episode.recorded_confirmed_at = datetime.now(UTC) - timedelta(days=1)
        episode.recorded_confirmed_by = 1
        session.add(episode)
        session.commit()

        episode.recorded = "0"
        session.add(episode)
        session.commit()
        session.expire_all()

        retrieved = session.get(Episode, episode.id)
        assert retrieved.recorded_confirmed_at is None
        assert retrieved.recorded_confirmed_by is None

    def test_query_confirmed_episodes(self, session: Session):
        """Test the backing columns can be queried directly."""
        done = Episode(title="Done")
        pending = Episode(title="Pending")
        done.set_confirmed("recorded", True, actor=1)
        pending.recorded_confirmed_by = 1
        session.add(done)
        session.add(pending)
        session.commit()

        statement = (
            select(Episode)
            .where(Episode.recorded_confirmed_at != None)  # noqa: E711
            .where(Episode.recorded_confirmed_by != None)  # noqa: E711
        )
        titles = [e.title for e in session.exec(statement).all()]
        assert titles == ["Done"]


class TestScriptModel:
    """Tests for the Script model."""

    def test_approval_is_persisted(self, script: Script, other_user: User, session: Session):
        """Test approving a script writes approved_at and approved_by."""
        with acting_as(other_user.id):
            script.approved = True
        session.add(script)
        session.commit()
        session.expire_all()

        retrieved = session.get(Script, script.id)
        assert retrieved.approved is True
        assert retrieved.approved_by == other_user.id
        assert retrieved.approved_confirmer == other_user

    def test_no_alias_for_empty_suffix(self):
        """Test the unsuffixed field is not replaced by an alias property."""
        assert not isinstance(Script.__dict__.get("approved_at"), property)
        assert isinstance(Episode.__dict__.get("recorded_at"), property)

    @pytest.mark.parametrize("value", ["0", False])
    def test_unapproved_script(self, script: Script, value):
        """Test unchecking an unapproved script leaves it unapproved."""
        script.approved = value
        assert script.approved is False
