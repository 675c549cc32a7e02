"""
Unit tests for ProfileService:
- Handle normalization and music link validation
- Reviewer settings
- Reviewer directory
"""
from decimal import Decimal

import pytest

from songqueue.exceptions import NotFoundError, ValidationError
from songqueue.schemas import Identity, ProfileUpdate, SubmissionCreate
from songqueue.services import ProfileService, QueueManager, ReviewService
from songqueue.services.profile_service import is_valid_music_url, normalize_handle


class TestHelpers:
    """Test pure helpers"""

    def test_normalize_handle(self):
        """Test handle variations"""
        assert normalize_handle("@luna") == "@luna"
        assert normalize_handle("luna") == "@luna"
        assert normalize_handle("  @luna ") == "@luna"
        assert normalize_handle("@") is None
        assert normalize_handle("   ") is None
        assert normalize_handle(None) is None

    def test_music_urls(self):
        """Test platform host checks"""
        assert is_valid_music_url("https://open.spotify.com/artist/1", "spotify_profile")
        assert is_valid_music_url("https://youtu.be/xyz", "youtube_profile")
        assert is_valid_music_url("https://soundcloud.com/luna", "soundcloud_profile")
        assert is_valid_music_url("https://dexsta.fun/luna", "dexsta_profile")
        assert not is_valid_music_url("https://evil-spotify.com/x", "spotify_profile")
        assert not is_valid_music_url("spotify.com/artist/1", "spotify_profile")
        assert not is_valid_music_url("ftp://spotify.com/x", "spotify_profile")


class TestProfileService:
    """Test profile updates and lookups"""

    @pytest.fixture(autouse=True)
    def setup(self, db_session, make_profile):
        self.db = db_session
        self.make_profile = make_profile
        self.service = ProfileService(db_session)
        self.user = make_profile("luna")

    def test_upsert_creates_then_refreshes(self):
        """Test first login creates the profile, later logins update it"""
        identity = Identity(id="oauth-1", email="new@example.com", username="newbie")
        created = self.service.upsert_identity(identity)
        assert created.username == "newbie"
        assert created.is_reviewer is False

        updated = self.service.upsert_identity(Identity(id="oauth-1", email="changed@example.com"))
        assert updated.email == "changed@example.com"
        assert updated.username == "newbie"

    def test_enable_reviewer_mode(self):
        """Test reviewer mode with handle and pricing"""
        profile = self.service.update(self.user, ProfileUpdate(
            is_reviewer=True, artist_name="Luna Vale", tiktok_handle="lunavale",
            skip_price_usd=5, free_skips=2
        ))
        assert profile.is_reviewer is True
        assert profile.tiktok_handle == "@lunavale"
        assert profile.reviewer_name == "@lunavale"
        assert profile.reviewer_url == "lunavale"
        assert Decimal(str(profile.skip_price_usd)) == Decimal("5")
        assert profile.free_skips == 2

    def test_reviewer_needs_name_and_handle(self):
        """Test missing requirements are all reported"""
        with pytest.raises(ValidationError) as exc:
            self.service.update(self.user, ProfileUpdate(is_reviewer=True, artist_name=None))
        assert "Artist name" in exc.value.message
        assert "TikTok handle" in exc.value.message

    def test_handle_must_be_unique(self):
        """Test handles are unique ignoring case"""
        self.make_profile("taken", is_reviewer=True)
        with pytest.raises(ValidationError):
            self.service.update(self.user, ProfileUpdate(tiktok_handle="@TAKEN"))

    def test_invalid_music_link(self):
        """Test links must match their platform"""
        with pytest.raises(ValidationError) as exc:
            self.service.update(self.user, ProfileUpdate(spotify_profile="https://example.com/me"))
        assert "Spotify" in exc.value.message

    def test_negative_price_rejected(self):
        """Test prices cannot be negative"""
        with pytest.raises(ValidationError):
            self.service.update(self.user, ProfileUpdate(skip_price_usd=-1))

    def test_fill_artist_details_only_empty_fields(self):
        """Test submission form details fill an empty profile once"""
        self.service.fill_artist_details(self.user, "Luna Vale", "lunavale")
        assert self.user.artist_name == "Luna Vale"
        assert self.user.tiktok_handle == "@lunavale"

        self.service.fill_artist_details(self.user, "Other Name", "other")
        assert self.user.artist_name == "Luna Vale"
        assert self.user.tiktok_handle == "@lunavale"

    def test_fill_artist_details_skips_taken_handle(self):
        """Test a handle owned by someone else is not copied"""
        self.make_profile("owner", is_reviewer=True)
        self.service.fill_artist_details(self.user, "Luna Vale", "@owner")
        assert self.user.tiktok_handle is None

    def test_get_reviewer_by_handle(self):
        """Test lookup with or without '@' and in any case"""
        reviewer = self.make_profile("djmax", is_reviewer=True)
        assert self.service.get_reviewer_by_handle("djmax").id == reviewer.id
        assert self.service.get_reviewer_by_handle("@DJMax").id == reviewer.id
        with pytest.raises(NotFoundError):
            self.service.get_reviewer_by_handle("@nobody")

    def test_skip_price(self):
        """Test price quote"""
        reviewer = self.make_profile("djmax", is_reviewer=True, skip_price_usd=Decimal("7.50"), free_skips=3)
        quote = self.service.skip_price(reviewer.id)
        assert quote.skip_price_usd == 7.5
        assert quote.free_skips == 3

        with pytest.raises(NotFoundError):
            self.service.skip_price(self.user.id)

    def test_reviewer_directory(self, song):
        """Test directory entries carry queue length and review stats"""
        online = self.make_profile("online", is_reviewer=True)
        offline = self.make_profile("offline", is_reviewer=False, tiktok_handle="@offline")
        queue = QueueManager(self.db)
        first = queue.enqueue(online.id, self.user.id, SubmissionCreate(**song("A")))
        queue.enqueue(online.id, self.user.id, SubmissionCreate(**song("B")))
        ReviewService(self.db).add_review(online.id, first.id, 4)

        directory = {entry.id: entry for entry in self.service.list_reviewers()}

        assert self.user.id not in directory
        assert directory[online.id].is_online is True
        assert directory[online.id].queue_length == 2
        assert directory[online.id].reviews_completed == 1
        assert directory[online.id].average_rating == 4.0
        assert directory[offline.id].is_online is False
        assert directory[offline.id].queue_length == 0

        online_only = [entry.id for entry in self.service.list_reviewers(online_only=True)]
        assert online_only == [online.id]
