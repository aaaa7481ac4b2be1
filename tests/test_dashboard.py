import pytest

from meetsync.aggregator.dashboard import (
    group_distraction_level,
    highly_distracted,
    level_band,
    participant_band,
)
from meetsync.aggregator.identity import GUEST_NAME, display_name_for, identity_for, new_meeting_id
from meetsync.models import AggregatedView, DistractionRecord, Status


def test_group_level():
    assert group_distraction_level(0, 0) == 0.0
    assert group_distraction_level(1, 4) == 25.0
    assert group_distraction_level(5, 4) == 100.0


@pytest.mark.parametrize("pct, band", [(0, "low"), (29.9, "low"), (30, "medium"), (59, "medium"), (60, "high")])
def test_level_band(pct, band):
    assert level_band(pct) == band


@pytest.mark.parametrize("pct, band", [(None, None), (39, "low"), (40, "medium"), (74, "medium"), (75, "high")])
def test_participant_band(pct, band):
    assert participant_band(pct) == band


def test_highly_distracted_needs_enough_checks_and_sorts_worst_first():
    view = AggregatedView(participants=[
        DistractionRecord("a", "A", Status.DISTRACTED, total_checks=10, distracted_checks=8),
        DistractionRecord("b", "B", Status.DISTRACTED, total_checks=9, distracted_checks=9),
        DistractionRecord("c", "C", Status.DISTRACTED, total_checks=20, distracted_checks=19),
        DistractionRecord("d", "D", Status.FOCUSED, total_checks=20, distracted_checks=14),
    ])
    assert [p.participant_id for p in highly_distracted(view)] == ["c", "a"]


@pytest.mark.parametrize(
    "user, expected",
    [
        ({"id": "u1", "full_name": "Ada Lovelace", "first_name": "Ada"}, "Ada Lovelace"),
        ({"id": "u1", "full_name": " ", "first_name": "Ada"}, "Ada"),
        ({"id": "u1", "username": "ada"}, "ada"),
        ({"id": "u1", "email_address": "ada@example.com"}, "ada@example.com"),
        ({"id": "u1"}, GUEST_NAME),
        (None, GUEST_NAME),
    ],
)
def test_display_name_fallback_chain(user, expected):
    assert display_name_for(user) == expected


def test_identity_for_objects():
    class User:
        id = "u9"
        full_name = None
        first_name = "Grace"

    identity = identity_for(User())
    assert identity.user_id == "u9"
    assert identity.display_name == "Grace"


def test_new_meeting_ids_are_unique():
    assert new_meeting_id() != new_meeting_id()
