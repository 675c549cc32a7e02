"""
Profile Service
Profile upserts on login, reviewer settings and the reviewer directory
"""
import logging
from typing import List, Optional
from urllib.parse import urlparse

from sqlalchemy import func
from sqlalchemy.orm import Session

from songqueue.exceptions import NotFoundError, ValidationError
from songqueue.models import Profile, Submission, SubmissionStatus
from songqueue.schemas.auth import Identity
from songqueue.schemas.profile import ProfileUpdate, ReviewerSummary, SkipPriceResponse
from songqueue.services.review_service import ReviewService

logger = logging.getLogger(__name__)

# Accepted hosts per music link field (subdomains allowed)
MUSIC_PLATFORM_DOMAINS = {
    "dexsta_profile": ["dexsta.fun"],
    "youtube_profile": ["youtube.com", "youtu.be"],
    "spotify_profile": ["spotify.com"],
    "soundcloud_profile": ["soundcloud.com"],
}


def normalize_handle(handle: Optional[str]) -> Optional[str]:
    """'@Name', 'name ' and 'name' all become '@name'-style handles; blank becomes None"""
    if handle is None:
        return None
    bare = handle.strip().lstrip("@").strip()
    if not bare:
        return None
    return f"@{bare}"


def is_valid_music_url(url: str, field: str) -> bool:
    """Check a music link points at the platform its field is for"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False

    host = parsed.hostname.lower()
    return any(host == domain or host.endswith("." + domain) for domain in MUSIC_PLATFORM_DOMAINS[field])


class ProfileService:
    """Profile store access for a database session"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, profile_id: str) -> Profile:
        profile = self.db.query(Profile).filter(Profile.id == profile_id).first()
        if profile is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        return profile

    def upsert_identity(self, identity: Identity) -> Profile:
        """
        Create the profile for a newly seen identity or refresh its email/username

        The identity comes from the auth provider and is trusted as-is.
        """
        profile = self.db.query(Profile).filter(Profile.id == identity.id).first()
        if profile is None:
            profile = Profile(id=identity.id, email=identity.email, username=identity.username)
            self.db.add(profile)
            logger.info(f"Created profile for new user {identity.id}")
        else:
            profile.email = identity.email or profile.email
            profile.username = identity.username or profile.username

        self.db.commit()
        self.db.refresh(profile)
        return profile

    def update(self, profile: Profile, changes: ProfileUpdate) -> Profile:
        """
        Apply settings changes after validating the resulting profile

        Raises:
            ValidationError: With every problem found, joined into one message
        """
        data = changes.model_dump(exclude_unset=True)
        if "tiktok_handle" in data:
            data["tiktok_handle"] = normalize_handle(data["tiktok_handle"])
        for key in ("artist_name", "bio", "cashapp", "apple_pay", "sei_wallet") + tuple(MUSIC_PLATFORM_DOMAINS):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()

        errors = self._validate(profile, data)
        if errors:
            raise ValidationError("; ".join(errors))

        for key, value in data.items():
            # NOT NULL columns keep their value when sent as null
            if value is None and key in ("is_reviewer", "free_skips", "skip_price_usd", "skip_price_sei"):
                continue
            setattr(profile, key, value)

        handle = profile.tiktok_handle
        profile.reviewer_name = handle
        profile.reviewer_url = handle.lstrip("@") if handle else ""

        self.db.commit()
        self.db.refresh(profile)
        logger.info(f"Profile {profile.id} updated (reviewer={profile.is_reviewer})")
        return profile

    def _validate(self, profile: Profile, data: dict) -> List[str]:
        errors = []

        is_reviewer = data["is_reviewer"] if data.get("is_reviewer") is not None else profile.is_reviewer
        artist_name = data["artist_name"] if "artist_name" in data else profile.artist_name
        handle = data["tiktok_handle"] if "tiktok_handle" in data else profile.tiktok_handle

        if is_reviewer:
            if not artist_name:
                errors.append("Artist name is required to become a reviewer")
            if not handle:
                errors.append("TikTok handle is required to become a reviewer")

        if data.get("tiktok_handle"):
            taken = self.db.query(Profile.id).filter(
                func.lower(Profile.tiktok_handle) == data["tiktok_handle"].lower(),
                Profile.id != profile.id
            ).first()
            if taken:
                errors.append(f"TikTok handle {data['tiktok_handle']} is already taken")

        for field in MUSIC_PLATFORM_DOMAINS:
            url = data.get(field)
            if url and not is_valid_music_url(url, field):
                platform = field.replace("_profile", "").capitalize()
                errors.append(f"Please enter a valid {platform} URL")

        for field in ("free_skips", "skip_price_usd", "skip_price_sei"):
            value = data.get(field)
            if value is not None and value < 0:
                errors.append(f"{field} cannot be negative")

        return errors

    def fill_artist_details(self, profile: Profile, artist_name: str, tiktok_name: str) -> None:
        """
        Remember the artist name and handle typed into a submission form

        Only empty profile fields are filled; a handle owned by someone else is
        ignored rather than failing the submission.
        """
        changed = False
        if not profile.artist_name and artist_name:
            profile.artist_name = artist_name.strip()
            changed = True

        handle = normalize_handle(tiktok_name)
        if not profile.tiktok_handle and handle:
            taken = self.db.query(Profile.id).filter(
                func.lower(Profile.tiktok_handle) == handle.lower(),
                Profile.id != profile.id
            ).first()
            if taken:
                logger.warning(f"Not saving handle {handle} for {profile.id}: already taken")
            else:
                profile.tiktok_handle = handle
                changed = True

        if changed:
            self.db.commit()

    def get_reviewer_by_handle(self, handle: str) -> Profile:
        """
        Look up a reviewer by TikTok handle, with or without '@'

        Raises:
            NotFoundError: If no profile owns the handle
        """
        normalized = normalize_handle(handle)
        profile = None
        if normalized:
            profile = self.db.query(Profile).filter(
                func.lower(Profile.tiktok_handle) == normalized.lower()
            ).first()
        if profile is None:
            raise NotFoundError(f"Reviewer {handle} not found")
        return profile

    def skip_price(self, reviewer_id: str) -> SkipPriceResponse:
        reviewer = self.get(reviewer_id)
        if not reviewer.is_reviewer:
            raise NotFoundError(f"Reviewer {reviewer_id} not found")
        return SkipPriceResponse(
            reviewer_id=reviewer.id,
            skip_price_usd=float(reviewer.skip_price_usd or 0),
            skip_price_sei=float(reviewer.skip_price_sei or 0),
            free_skips=reviewer.free_skips or 0
        )

    def list_reviewers(self, online_only: bool = False) -> List[ReviewerSummary]:
        """
        Reviewer directory: every profile with a TikTok handle plus queue stats

        Args:
            online_only: Only include profiles with reviewer mode switched on
        """
        query = self.db.query(Profile).filter(
            Profile.tiktok_handle.isnot(None),
            Profile.tiktok_handle != ""
        )
        if online_only:
            query = query.filter(Profile.is_reviewer.is_(True))
        profiles = query.order_by(Profile.tiktok_handle.asc()).all()

        reviewer_ids = [profile.id for profile in profiles]
        queue_lengths = dict(
            self.db.query(Submission.reviewer_id, func.count(Submission.id))
            .filter(
                Submission.reviewer_id.in_(reviewer_ids),
                Submission.status == SubmissionStatus.PENDING
            )
            .group_by(Submission.reviewer_id)
            .all()
        ) if reviewer_ids else {}
        stats = ReviewService(self.db).reviewer_stats(reviewer_ids)

        return [
            ReviewerSummary(
                id=profile.id,
                username=profile.username,
                tiktok_handle=profile.tiktok_handle,
                reviewer_name=profile.reviewer_name or profile.tiktok_handle,
                reviewer_url=profile.reviewer_url or profile.tiktok_handle.lstrip("@"),
                profile_image_url=profile.profile_image_url,
                is_online=bool(profile.is_reviewer),
                queue_length=queue_lengths.get(profile.id, 0),
                reviews_completed=stats[profile.id]["reviews_completed"],
                average_rating=stats[profile.id]["average_rating"],
                skip_price_usd=float(profile.skip_price_usd or 0),
                skip_price_sei=float(profile.skip_price_sei or 0),
                free_skips=profile.free_skips or 0
            )
            for profile in profiles
        ]
