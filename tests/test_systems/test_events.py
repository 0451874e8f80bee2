"""Tests for events and event hosts."""

import pytest

from skillforge.entities.records import EventSubtype
from skillforge.errors import StructuralAssociationError
from skillforge.systems.events import ScheduledEvent


class TestEvents:
    """Tests for event derivation."""

    def test_host_gathers_events(self, warrior, pipeline):
        state = pipeline.run(warrior)
        events = state.entity("g-sword").values["events"]
        assert events == {
            "Oil the blade": ScheduledEvent(
                id="ev-oil",
                title="Oil the blade",
                subtype=EventSubtype.BASIC,
                host_id="g-sword",
            )
        }

    def test_host_without_events(self, warrior, pipeline):
        state = pipeline.run(warrior)
        assert state.entity("s-sword").values["events"] == {}

    def test_script_action(self, make_owner, pipeline):
        owner = make_owner(
            [
                {
                    "id": "ev-train",
                    "kind": "event",
                    "name": "train",
                    "title": "Training",
                    "subtype": "script_action",
                    "script": "improve",
                    "nested_in": "s-sword",
                }
            ]
        )
        state = pipeline.run(owner)
        event = state.entity("s-sword").values["events"]["Training"]
        assert event.script == "improve"
        assert event.subtype == EventSubtype.SCRIPT_ACTION

    def test_unattached_event(self, make_owner, pipeline):
        owner = make_owner([{"id": "ev-free", "kind": "event", "name": "Free"}])
        state = pipeline.run(owner)
        assert state.entity("ev-free").values["event"].host_id is None

    def test_unsupported_container(self, make_owner, pipeline):
        """Events cannot be nested in a strike mode."""
        owner = make_owner(
            [{"id": "ev-bad", "kind": "event", "name": "Bad", "nested_in": "sm-swing"}]
        )
        with pytest.raises(StructuralAssociationError, match="Unsupported container kind"):
            pipeline.run(owner)
