"""
Unit tests for QueueEventHub
"""
import asyncio

import pytest

from songqueue.services import QueueEventHub


class TestQueueEventHub:
    """Test queue event fan-out"""

    def setup_method(self):
        """Setup test fixtures"""
        self.hub = QueueEventHub(max_queue_size=2)

    @pytest.mark.asyncio
    async def test_subscriber_receives_events_in_order(self):
        """Test events arrive with increasing sequence numbers"""
        events = self.hub.subscribe("reviewer-1")

        self.hub.publish("submission_enqueued", "reviewer-1", submission_id="s1", status="pending", queue_position=0)
        self.hub.publish("submission_moved", "reviewer-1", submission_id="s1", status="pending", queue_position=1)

        first = await asyncio.wait_for(events.get(), timeout=1)
        second = await asyncio.wait_for(events.get(), timeout=1)

        assert first["type"] == "submission_enqueued"
        assert first["submission_id"] == "s1"
        assert [first["sequence"], second["sequence"]] == [1, 2]

    @pytest.mark.asyncio
    async def test_events_are_per_reviewer(self):
        """Test subscribers only see their reviewer's queue"""
        mine = self.hub.subscribe("reviewer-1")
        self.hub.publish("submission_enqueued", "reviewer-2", submission_id="other")
        await asyncio.sleep(0)

        assert mine.empty()
        assert self.hub.current_sequence("reviewer-2") == 1
        assert self.hub.current_sequence("reviewer-1") == 0

    @pytest.mark.asyncio
    async def test_full_buffer_drops_and_leaves_gap(self):
        """Test overflow drops events; the sequence gap tells the client to reload"""
        events = self.hub.subscribe("reviewer-1")
        for index in range(3):
            self.hub.publish("submission_enqueued", "reviewer-1", submission_id=f"s{index}")
        await asyncio.sleep(0)

        assert events.qsize() == 2
        events.get_nowait()
        events.get_nowait()

        self.hub.publish("submission_enqueued", "reviewer-1", submission_id="s3")
        latest = await asyncio.wait_for(events.get(), timeout=1)
        assert latest["sequence"] == 4

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        """Test unsubscribed queues receive nothing"""
        events = self.hub.subscribe("reviewer-1")
        assert self.hub.subscriber_count("reviewer-1") == 1

        self.hub.unsubscribe("reviewer-1", events)
        self.hub.publish("submission_removed", "reviewer-1", submission_id="s1")
        await asyncio.sleep(0)

        assert self.hub.subscriber_count("reviewer-1") == 0
        assert events.empty()

    def test_publish_without_subscribers(self):
        """Test publishing with nobody listening still advances the sequence"""
        event = self.hub.publish("submission_reviewed", "reviewer-1", submission_id="s1", status="reviewed")
        assert event.sequence == 1
        assert event.status == "reviewed"
