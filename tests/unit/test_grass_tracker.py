"""
Unit tests for the voice activity tracker.

The tracker is pure: these tests feed it PresenceChange values and check
the Upsert effects it returns.
"""

import pytest
from nationcraft.grass.models import (
    EditDisplay,
    PresenceChange,
    SendDisplay,
    Upsert,
    VoiceSession,
)
from nationcraft.grass.tracker import (
    GrassTracker,
    compute_increment,
    session_multiplier,
    MANUAL_TOUCH_POINTS,
)

USER = 42


def enter(now, user_id=USER, muted=False, deafened=False, is_bot=False, name="Steve"):
    return PresenceChange(
        user_id=user_id,
        display_name=name,
        was_in_channel=False,
        is_in_channel=True,
        self_muted=muted,
        self_deafened=deafened,
        now=now,
        is_bot=is_bot,
    )


def leave(now, user_id=USER, is_bot=False, name="Steve"):
    return PresenceChange(
        user_id=user_id,
        display_name=name,
        was_in_channel=True,
        is_in_channel=False,
        self_muted=False,
        self_deafened=False,
        now=now,
        is_bot=is_bot,
    )


def move(now, user_id=USER):
    return PresenceChange(
        user_id=user_id,
        display_name="Steve",
        was_in_channel=True,
        is_in_channel=True,
        self_muted=True,
        self_deafened=False,
        now=now,
    )


@pytest.fixture
def tracker():
    return GrassTracker()


class TestComputeIncrement:
    """Tests for session scoring"""

    def test_multiplier_active(self, t0):
        session = VoiceSession(USER, t0, self_muted=False, self_deafened=False)
        assert session_multiplier(session) == 2

    @pytest.mark.parametrize("muted,deafened", [(True, False), (False, True), (True, True)])
    def test_multiplier_muted_or_deafened(self, t0, muted, deafened):
        session = VoiceSession(USER, t0, self_muted=muted, self_deafened=deafened)
        assert session_multiplier(session) == 1

    def test_below_threshold_scores_nothing(self, t0, at):
        session = VoiceSession(USER, t0, False, False)
        assert compute_increment(session, at(29.9)) == 0

    def test_threshold_is_inclusive(self, t0, at):
        session = VoiceSession(USER, t0, False, False)
        assert compute_increment(session, at(30)) == 60

    def test_fractional_seconds_floor(self, t0, at):
        session = VoiceSession(USER, t0, False, False)
        assert compute_increment(session, at(45.7)) == 91

    def test_custom_threshold(self, t0, at):
        session = VoiceSession(USER, t0, True, False)
        assert compute_increment(session, at(10), min_session_seconds=5) == 10


class TestVoiceTransitions:
    """Tests for on_voice_presence_changed"""

    def test_enter_opens_session(self, tracker, t0):
        effects = tracker.on_voice_presence_changed(enter(t0))

        assert effects == ()
        assert tracker.is_active(USER)
        assert tracker.sessions[USER].joined_at == t0

    def test_unmuted_100_seconds_scores_200(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0))
        effects = tracker.on_voice_presence_changed(leave(at(100)))

        assert effects == (Upsert(user_id=USER, display_name="Steve", increment=200, now=at(100)),)
        assert not tracker.is_active(USER)

    def test_muted_10_seconds_scores_nothing(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0, muted=True))
        effects = tracker.on_voice_presence_changed(leave(at(10)))

        assert effects == ()
        assert not tracker.is_active(USER)

    def test_deafened_40_seconds_scores_40(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0, deafened=True))
        (effect,) = tracker.on_voice_presence_changed(leave(at(40)))

        assert effect.increment == 40

    def test_mute_state_taken_at_join(self, tracker, t0, at):
        """Unmuting mid-session does not change the multiplier"""
        tracker.on_voice_presence_changed(enter(t0, muted=True))
        tracker.on_voice_presence_changed(move(at(10)))
        (effect,) = tracker.on_voice_presence_changed(leave(at(60)))

        assert effect.increment == 60

    def test_bots_ignored(self, tracker, t0, at):
        assert tracker.on_voice_presence_changed(enter(t0, is_bot=True)) == ()
        assert not tracker.is_active(USER)
        assert tracker.on_voice_presence_changed(leave(at(100), is_bot=True)) == ()

    def test_leave_without_session_ignored(self, tracker, at):
        assert tracker.on_voice_presence_changed(leave(at(100))) == ()
        assert tracker.sessions == {}

    def test_channel_move_keeps_session(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0))

        assert tracker.on_voice_presence_changed(move(at(50))) == ()
        assert tracker.sessions[USER].joined_at == t0

        (effect,) = tracker.on_voice_presence_changed(leave(at(100)))
        assert effect.increment == 200

    def test_leave_then_join_counts_as_two_sessions(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0))
        first = tracker.on_voice_presence_changed(leave(at(60)))
        tracker.on_voice_presence_changed(enter(at(60)))
        second = tracker.on_voice_presence_changed(leave(at(120)))

        assert first[0].increment == 120
        assert second[0].increment == 120

    def test_duplicate_enter_overwrites_session(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0))
        tracker.on_voice_presence_changed(enter(at(50), muted=True))
        (effect,) = tracker.on_voice_presence_changed(leave(at(100)))

        assert effect.increment == 50

    def test_leave_clears_session_even_when_too_short(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0))
        tracker.on_voice_presence_changed(leave(at(5)))

        assert not tracker.is_active(USER)

    def test_users_tracked_independently(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0, user_id=1))
        tracker.on_voice_presence_changed(enter(at(20), user_id=2, muted=True))

        (effect_one,) = tracker.on_voice_presence_changed(leave(at(60), user_id=1))
        (effect_two,) = tracker.on_voice_presence_changed(leave(at(80), user_id=2))

        assert (effect_one.user_id, effect_one.increment) == (1, 120)
        assert (effect_two.user_id, effect_two.increment) == (2, 60)

    def test_display_name_from_leave_event(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0, name="Old Name"))
        (effect,) = tracker.on_voice_presence_changed(leave(at(60), name="New Name"))

        assert effect.display_name == "New Name"


class TestManualTouch:
    """Tests for the touch-grass button"""

    def test_always_one_point(self, tracker, t0):
        effect = tracker.on_manual_touch(USER, "Steve", t0)

        assert effect == Upsert(user_id=USER, display_name="Steve", increment=MANUAL_TOUCH_POINTS, now=t0)
        assert MANUAL_TOUCH_POINTS == 1

    def test_independent_of_voice_state(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0))

        effect = tracker.on_manual_touch(USER, "Steve", at(10))

        assert effect.increment == 1
        assert tracker.sessions[USER].joined_at == t0


class TestScoreSequences:
    """Totals across mixed voice and manual events"""

    def test_voice_then_three_touches_totals_203(self, tracker, t0, at):
        tracker.on_voice_presence_changed(enter(t0))
        effects = list(tracker.on_voice_presence_changed(leave(at(100))))
        for i in range(3):
            effects.append(tracker.on_manual_touch(USER, "Steve", at(101 + i)))

        total = sum(e.increment for e in effects)

        assert total == 203

    def test_increments_never_negative(self, tracker, t0, at):
        increments = []
        for start in range(0, 600, 37):
            tracker.on_voice_presence_changed(enter(at(start), muted=start % 2 == 0))
            increments.extend(
                e.increment for e in tracker.on_voice_presence_changed(leave(at(start + start % 50)))
            )

        assert all(i > 0 for i in increments)


class TestDisplayPlanning:
    """Tests for the scheduled summary message bookkeeping"""

    def test_first_display_is_sent(self, tracker):
        assert tracker.plan_display("hello") == SendDisplay(content="hello")

    def test_remembered_message_is_edited(self, tracker):
        tracker.remember_display(555)
        assert tracker.plan_display("hello") == EditDisplay(message_id=555, content="hello")

    def test_forgetting_goes_back_to_send(self, tracker):
        tracker.remember_display(555)
        tracker.remember_display(None)
        assert isinstance(tracker.plan_display("hello"), SendDisplay)
