"""
Tests for studio.models.status
"""

import pytest

from studio.models import ALLOWED_TRANSITIONS, JobKind, JobStatus


class TestJobStatus:
    def test_values(self):
        assert [s.value for s in JobStatus] == ["pending", "generating", "completed", "failed"]

    @pytest.mark.parametrize(
        "status,terminal",
        [
            (JobStatus.PENDING, False),
            (JobStatus.GENERATING, False),
            (JobStatus.COMPLETED, True),
            (JobStatus.FAILED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        assert status.is_terminal() is terminal

    def test_forward_transitions(self):
        assert JobStatus.PENDING.can_transition_to(JobStatus.GENERATING)
        assert JobStatus.GENERATING.can_transition_to(JobStatus.COMPLETED)
        assert JobStatus.GENERATING.can_transition_to(JobStatus.FAILED)

    def test_no_backwards_or_skipping(self):
        assert not JobStatus.GENERATING.can_transition_to(JobStatus.PENDING)
        assert not JobStatus.PENDING.can_transition_to(JobStatus.COMPLETED)
        assert not JobStatus.PENDING.can_transition_to(JobStatus.FAILED)

    def test_terminal_statuses_are_final(self):
        for status in (JobStatus.COMPLETED, JobStatus.FAILED):
            assert ALLOWED_TRANSITIONS[status] == frozenset()
            assert not any(status.can_transition_to(target) for target in JobStatus)


class TestJobKind:
    def test_id_prefix(self):
        assert JobKind.UGC_VIDEO.id_prefix == "ugc"
        assert JobKind.PROMO_VIDEO.id_prefix == "promo"

    def test_string_valued(self):
        assert JobKind("promo_video") is JobKind.PROMO_VIDEO
        assert JobKind.UGC_VIDEO == "ugc_video"
