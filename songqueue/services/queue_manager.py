"""
Queue Manager
Owns the lifecycle and ordering of each reviewer's submission queue.

Ordering rules:
- Pending submissions of a reviewer are ordered by queue_position ascending;
  index 0 is the next one to be reviewed.
- New submissions go to the tail (max + 1), skips go to the head (min - 1).
- Reordering only swaps a submission with its immediate neighbour.
- Reviewed and removed submissions keep their last position but no longer
  take part in the ordering.

Positions are unique per reviewer among pending rows (partial unique index).
Writes that lose a race on a position are rolled back and retried with a
freshly computed value.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from songqueue.config import settings
from songqueue.exceptions import (
    IOFailure, InvalidOperationError, NotFoundError, PaymentRequiredError, ValidationError
)
from songqueue.models import Profile, SkipPayment, Submission, SubmissionStatus
from songqueue.schemas.submission import SubmissionCreate
from songqueue.services.notifications import QueueEventHub
from songqueue.services.payment_verifier import PaymentVerifier, VerifiedPayment

logger = logging.getLogger(__name__)


class QueueManager:
    """Reviewer queue operations over a database session"""

    REQUIRED_FIELDS = ("artist_name", "tiktok_name", "song_title", "song_link", "song_story")

    def __init__(
        self,
        db: Session,
        event_hub: Optional[QueueEventHub] = None,
        payment_verifier: Optional[PaymentVerifier] = None
    ):
        self.db = db
        self.event_hub = event_hub
        self.payment_verifier = payment_verifier or PaymentVerifier()
        self.max_attempts = max(1, settings.QUEUE_WRITE_RETRIES)

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def _pending_query(self, reviewer_id: str):
        return self.db.query(Submission).filter(
            Submission.reviewer_id == reviewer_id,
            Submission.status == SubmissionStatus.PENDING
        )

    def list_queue(self, reviewer_id: str) -> List[Submission]:
        """
        Get a reviewer's pending submissions in review order

        An unknown reviewer simply has an empty queue.
        """
        return self._pending_query(reviewer_id).order_by(Submission.queue_position.asc()).all()

    def get_pending(self, reviewer_id: str, submission_id: str) -> Submission:
        """
        Get a submission that is currently pending in the reviewer's queue

        Raises:
            NotFoundError: If the submission is not pending for that reviewer
        """
        submission = self._pending_query(reviewer_id).filter(Submission.id == submission_id).first()
        if submission is None:
            raise NotFoundError(f"Submission {submission_id} is not in the pending queue of reviewer {reviewer_id}")
        return submission

    def neighbour_position(self, reviewer_id: str, submission_id: str, direction: str) -> int:
        """
        Resolve 'up' or 'down' to the position held by the adjacent submission

        Raises:
            NotFoundError: If the submission is not in the queue
            InvalidOperationError: If there is no neighbour in that direction
        """
        queue = self.list_queue(reviewer_id)
        index = self._index_of(queue, submission_id)

        if direction == "up":
            if index == 0:
                raise InvalidOperationError("Submission is already at the head of the queue")
            return queue[index - 1].queue_position
        if direction == "down":
            if index == len(queue) - 1:
                raise InvalidOperationError("Submission is already at the tail of the queue")
            return queue[index + 1].queue_position
        raise ValidationError(f"Unknown direction: {direction}")

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def enqueue(self, reviewer_id: str, submitter_id: str, payload: SubmissionCreate) -> Submission:
        """
        Append a new submission to the tail of a reviewer's queue

        Args:
            reviewer_id: Reviewer the song is submitted to
            submitter_id: Artist submitting the song
            payload: Descriptive fields; attachments are already uploaded URLs

        Returns:
            Submission: The new pending submission

        Raises:
            ValidationError: If a required field is blank or terms were not accepted
            NotFoundError: If the reviewer does not exist or is not accepting submissions
            IOFailure: If no free tail position could be claimed
        """
        fields = self._clean_payload(payload)

        reviewer = self.db.query(Profile).filter(Profile.id == reviewer_id).first()
        if reviewer is None or not reviewer.is_reviewer:
            raise NotFoundError(f"Reviewer {reviewer_id} is not accepting submissions")

        for attempt in range(1, self.max_attempts + 1):
            position = self._tail_position(reviewer_id)
            submission = Submission(
                reviewer_id=reviewer_id,
                user_id=submitter_id,
                status=SubmissionStatus.PENDING,
                queue_position=position,
                **fields
            )
            self.db.add(submission)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if not self._position_taken(reviewer_id, position):
                    raise
                logger.warning(
                    f"Queue position {position} already taken for reviewer {reviewer_id}, "
                    f"retrying ({attempt}/{self.max_attempts})"
                )
                continue

            self.db.refresh(submission)
            logger.info(f"Enqueued submission {submission.id} for reviewer {reviewer_id} at position {position}")
            self._publish("submission_enqueued", submission)
            return submission

        raise IOFailure(f"Could not claim a queue position for reviewer {reviewer_id}")

    def _clean_payload(self, payload: SubmissionCreate) -> dict:
        if not payload.agreed_to_terms:
            raise ValidationError("Please agree to the terms and conditions")

        fields = payload.model_dump(exclude={"agreed_to_terms"})
        fields = {
            key: value.strip() if isinstance(value, str) else value
            for key, value in fields.items()
        }

        missing = [name for name in self.REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        # Optional fields are stored as NULL rather than empty strings
        for name in ("genre", "featuring", "artwork_url", "audio_url"):
            if not fields.get(name):
                fields[name] = None
        return fields

    def _tail_position(self, reviewer_id: str) -> int:
        current_max = self.db.query(func.max(Submission.queue_position)).filter(
            Submission.reviewer_id == reviewer_id,
            Submission.status == SubmissionStatus.PENDING
        ).scalar()
        return 0 if current_max is None else current_max + 1

    def _head_position(self, reviewer_id: str) -> int:
        current_min = self.db.query(func.min(Submission.queue_position)).filter(
            Submission.reviewer_id == reviewer_id,
            Submission.status == SubmissionStatus.PENDING
        ).scalar()
        return 0 if current_min is None else current_min

    def _position_holder(self, reviewer_id: str, position: int) -> Optional[Submission]:
        return self._pending_query(reviewer_id).filter(Submission.queue_position == position).first()

    def _position_taken(self, reviewer_id: str, position: int) -> bool:
        return self._position_holder(reviewer_id, position) is not None

    # ------------------------------------------------------------------
    # Reordering
    # ------------------------------------------------------------------

    def reorder(self, reviewer_id: str, submission_id: str, target_position: int) -> List[Submission]:
        """
        Swap a submission with the adjacent submission holding target_position

        Args:
            reviewer_id: Reviewer performing the move; must own the queue
            submission_id: Submission to move
            target_position: Current position of the neighbour above or below

        Returns:
            List[Submission]: The queue after the swap

        Raises:
            NotFoundError: If the submission is not in the reviewer's pending queue
            InvalidOperationError: If the move is past the head or tail, or the
                target is not held by an adjacent submission
            IOFailure: If the swap could not be committed (nothing changes)
        """
        queue = self._locked_queue(reviewer_id)
        index = self._index_of(queue, submission_id)
        submission = queue[index]
        current_position = submission.queue_position

        if target_position == current_position:
            raise InvalidOperationError("Submission already holds that position")

        if target_position < current_position:
            if index == 0:
                raise InvalidOperationError("Submission is already at the head of the queue")
            neighbour = queue[index - 1]
        else:
            if index == len(queue) - 1:
                raise InvalidOperationError("Submission is already at the tail of the queue")
            neighbour = queue[index + 1]

        if neighbour.queue_position != target_position:
            raise InvalidOperationError(
                f"Position {target_position} is not held by a submission adjacent to {submission_id}"
            )

        try:
            self._swap(submission, neighbour)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Reorder failed for reviewer {reviewer_id}: {e}", exc_info=True)
            raise IOFailure("Queue reorder failed; no positions were changed") from e

        logger.info(
            f"Swapped submission {submission.id} ({current_position} -> {submission.queue_position}) "
            f"with {neighbour.id} for reviewer {reviewer_id}"
        )
        self._publish("submission_moved", submission)
        self._publish("submission_moved", neighbour)
        return self.list_queue(reviewer_id)

    def _locked_queue(self, reviewer_id: str) -> List[Submission]:
        return (
            self._pending_query(reviewer_id)
            .order_by(Submission.queue_position.asc())
            .with_for_update()
            .all()
        )

    @staticmethod
    def _index_of(queue: List[Submission], submission_id: str) -> int:
        for index, submission in enumerate(queue):
            if submission.id == submission_id:
                return index
        raise NotFoundError(f"Submission {submission_id} is not in this reviewer's pending queue")

    def _swap(self, first: Submission, second: Submission) -> None:
        """Exchange two positions inside the current transaction"""
        first_position, second_position = first.queue_position, second.queue_position
        # Park the first row outside the unique index while the second moves in
        first.queue_position = None
        self.db.flush()
        second.queue_position = first_position
        self.db.flush()
        first.queue_position = second_position
        self.db.flush()

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def mark_reviewed(self, reviewer_id: str, submission_id: str) -> Submission:
        """Move a pending submission to 'reviewed' (shows up in history)"""
        return self._retire(reviewer_id, submission_id, SubmissionStatus.REVIEWED)

    def remove(self, reviewer_id: str, submission_id: str) -> Submission:
        """Move a pending submission to 'removed'; rows are never deleted"""
        return self._retire(reviewer_id, submission_id, SubmissionStatus.REMOVED)

    def _retire(self, reviewer_id: str, submission_id: str, new_status: str) -> Submission:
        # Single conditional UPDATE so two concurrent transitions cannot both win
        updated = (
            self._pending_query(reviewer_id)
            .filter(Submission.id == submission_id)
            .update(
                {Submission.status: new_status, Submission.updated_at: func.now()},
                synchronize_session=False
            )
        )
        if updated == 0:
            self.db.rollback()
            raise NotFoundError(f"Submission {submission_id} is not pending for reviewer {reviewer_id}")
        self.db.commit()

        submission = self.db.get(Submission, submission_id)
        self.db.refresh(submission)
        logger.info(f"Submission {submission_id} marked {new_status} by reviewer {reviewer_id}")
        self._publish(f"submission_{new_status}", submission)
        return submission

    # ------------------------------------------------------------------
    # Skip the line
    # ------------------------------------------------------------------

    def skip_line(
        self,
        reviewer_id: str,
        submission_id: str,
        payment_proof: Optional[str] = None,
        use_free_skip: bool = False
    ) -> Submission:
        """
        Move a paid-for submission ahead of every other pending submission

        Args:
            reviewer_id: Queue owner
            submission_id: Submission being moved
            payment_proof: Signed proof from the payment provider
            use_free_skip: Spend one of the reviewer's free-skip credits instead

        Returns:
            Submission: The submission at its new head position

        Raises:
            NotFoundError: If the submission is not in the reviewer's pending queue
            InvalidOperationError: If the submission is already next in line
            PaymentRequiredError: If the proof is missing, invalid or already redeemed,
                or no free skips are left
        """
        submission = self.get_pending(reviewer_id, submission_id)
        reviewer = self.db.query(Profile).filter(Profile.id == reviewer_id).first()
        if reviewer is None:
            raise NotFoundError(f"Reviewer {reviewer_id} not found")

        queue = self.list_queue(reviewer_id)
        if queue and queue[0].id == submission.id:
            raise InvalidOperationError("Submission is already next in line")

        if use_free_skip:
            payment = VerifiedPayment(reference=f"free:{uuid.uuid4()}", method="free", amount=0)
        else:
            payment = self.payment_verifier.verify(payment_proof, submission, reviewer)
            if self._redeemed(payment.reference):
                raise PaymentRequiredError("Payment proof has already been redeemed")

        racing: Optional[Submission] = None
        reordered: Optional[Submission] = None
        for attempt in range(1, self.max_attempts + 1):
            reordered = None
            submission = self.get_pending(reviewer_id, submission_id)
            if use_free_skip:
                self._consume_free_skip(reviewer_id)

            position = self._head_position(reviewer_id) - 1
            submission.queue_position = position
            submission.skipped_at = datetime.now(timezone.utc)
            self.db.add(SkipPayment(
                reference=payment.reference,
                submission_id=submission.id,
                reviewer_id=reviewer_id,
                method=payment.method,
                amount=payment.amount
            ))
            try:
                self.db.flush()
                if racing is not None:
                    reordered = self._order_racing_skips(submission, racing.id)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if self._redeemed(payment.reference):
                    raise PaymentRequiredError("Payment proof has already been redeemed")
                racing = self._position_holder(reviewer_id, position)
                if racing is None:
                    raise
                logger.warning(
                    f"Skip position {position} taken by {racing.id} for reviewer {reviewer_id}, "
                    f"retrying ({attempt}/{self.max_attempts})"
                )
                continue

            self.db.refresh(submission)
            logger.info(
                f"Submission {submission.id} skipped the line for reviewer {reviewer_id} "
                f"({payment.method}, ref {payment.reference}) to position {submission.queue_position}"
            )
            self._publish("submission_skipped", submission)
            if reordered is not None:
                self._publish("submission_moved", reordered)
            return submission

        raise IOFailure(f"Could not claim the head of the queue for reviewer {reviewer_id}")

    def _redeemed(self, reference: str) -> bool:
        return self.db.query(SkipPayment.id).filter(SkipPayment.reference == reference).first() is not None

    def _consume_free_skip(self, reviewer_id: str) -> None:
        updated = (
            self.db.query(Profile)
            .filter(Profile.id == reviewer_id, Profile.free_skips > 0)
            .update({Profile.free_skips: Profile.free_skips - 1}, synchronize_session=False)
        )
        if updated == 0:
            self.db.rollback()
            raise PaymentRequiredError("This reviewer has no free skips left")

    def _order_racing_skips(self, submission: Submission, racing_id: str) -> Optional[Submission]:
        """
        Break a lost skip race by original enqueue time.

        The competing skip took the head slot first, so `submission` now sits
        directly in front of it. If the competitor was enqueued earlier, it
        goes back in front. Returns the competitor when it was moved.
        """
        racing = self.db.get(Submission, racing_id)
        if (
            racing is None
            or racing.status != SubmissionStatus.PENDING
            or racing.reviewer_id != submission.reviewer_id
            or racing.queue_position != submission.queue_position + 1
        ):
            return None
        if racing.created_at is None or submission.created_at is None:
            return None
        if racing.created_at < submission.created_at:
            self._swap(submission, racing)
            return racing
        return None

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _publish(self, event_type: str, submission: Submission) -> None:
        if self.event_hub is None:
            return
        self.event_hub.publish(
            event_type,
            submission.reviewer_id,
            submission_id=submission.id,
            status=submission.status,
            queue_position=submission.queue_position
        )
