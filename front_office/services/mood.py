"""Owner mood tracking: event impacts, decay toward neutral, public statements."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models import Owner, SecondaryTrait, clamp, round_half_up, to_plain
from ..patience import apply_patience_change
from ..rng import RandomSource, pick


class MoodEventType(str, Enum):
    WIN = "win"
    LOSS = "loss"
    BLOWOUT_WIN = "blowoutWin"
    BLOWOUT_LOSS = "blowoutLoss"
    PLAYOFF_WIN = "playoffWin"
    PLAYOFF_LOSS = "playoffLoss"
    SUPER_BOWL_WIN = "superBowlWin"
    SUPER_BOWL_LOSS = "superBowlLoss"
    DRAFT_SUCCESS = "draftSuccess"
    DRAFT_DISAPPOINTMENT = "draftDisappointment"
    SIGNING_SUCCESS = "signingSuccess"
    SIGNING_FAILURE = "signingFailure"
    TRADE_SUCCESS = "tradeSuccess"
    TRADE_FAILURE = "tradeFailure"
    MEDIA_POSITIVE = "mediaPositive"
    MEDIA_NEGATIVE = "mediaNegative"
    PLAYER_CONFLICT = "playerConflict"
    COACH_CONFLICT = "coachConflict"
    FAN_RALLY = "fanRally"
    FAN_PROTEST = "fanProtest"
    RIVALRY_WIN = "rivalryWin"
    RIVALRY_LOSS = "rivalryLoss"
    STREAK_WIN = "streakWin"
    STREAK_LOSS = "streakLoss"
    RECORD_BREAKING = "recordBreaking"
    INJURY = "injury"
    SCANDAL = "scandal"


class OwnerMood(str, Enum):
    ELATED = "elated"
    PLEASED = "pleased"
    CONTENT = "content"
    NEUTRAL = "neutral"
    CONCERNED = "concerned"
    FRUSTRATED = "frustrated"
    ANGRY = "angry"
    FURIOUS = "furious"


@dataclass(frozen=True)
class MoodImpact:
    mood: int
    patience: int
    trust: int


MOOD_EVENT_IMPACTS: Dict[MoodEventType, MoodImpact] = {
    MoodEventType.WIN: MoodImpact(5, 2, 1),
    MoodEventType.LOSS: MoodImpact(-5, -3, -1),
    MoodEventType.BLOWOUT_WIN: MoodImpact(10, 4, 2),
    MoodEventType.BLOWOUT_LOSS: MoodImpact(-12, -6, -3),
    MoodEventType.PLAYOFF_WIN: MoodImpact(20, 10, 5),
    MoodEventType.PLAYOFF_LOSS: MoodImpact(-15, -8, -4),
    MoodEventType.SUPER_BOWL_WIN: MoodImpact(50, 30, 15),
    MoodEventType.SUPER_BOWL_LOSS: MoodImpact(-10, -5, -2),
    MoodEventType.DRAFT_SUCCESS: MoodImpact(15, 8, 5),
    MoodEventType.DRAFT_DISAPPOINTMENT: MoodImpact(-10, -6, -4),
    MoodEventType.SIGNING_SUCCESS: MoodImpact(12, 6, 4),
    MoodEventType.SIGNING_FAILURE: MoodImpact(-8, -5, -3),
    MoodEventType.TRADE_SUCCESS: MoodImpact(15, 7, 5),
    MoodEventType.TRADE_FAILURE: MoodImpact(-12, -7, -5),
    MoodEventType.MEDIA_POSITIVE: MoodImpact(8, 3, 2),
    MoodEventType.MEDIA_NEGATIVE: MoodImpact(-10, -5, -3),
    MoodEventType.PLAYER_CONFLICT: MoodImpact(-8, -4, -3),
    MoodEventType.COACH_CONFLICT: MoodImpact(-10, -5, -4),
    MoodEventType.FAN_RALLY: MoodImpact(10, 5, 3),
    MoodEventType.FAN_PROTEST: MoodImpact(-15, -8, -5),
    MoodEventType.RIVALRY_WIN: MoodImpact(15, 5, 3),
    MoodEventType.RIVALRY_LOSS: MoodImpact(-15, -6, -3),
    MoodEventType.STREAK_WIN: MoodImpact(8, 4, 2),
    MoodEventType.STREAK_LOSS: MoodImpact(-10, -5, -2),
    MoodEventType.RECORD_BREAKING: MoodImpact(20, 8, 5),
    MoodEventType.INJURY: MoodImpact(-5, -2, 0),
    MoodEventType.SCANDAL: MoodImpact(-25, -12, -8),
}

_MEDIA_EVENTS = {MoodEventType.MEDIA_POSITIVE, MoodEventType.MEDIA_NEGATIVE}
_FAN_EVENTS = {MoodEventType.FAN_PROTEST, MoodEventType.FAN_RALLY}
_PLAYOFF_EVENTS = {
    MoodEventType.PLAYOFF_WIN,
    MoodEventType.PLAYOFF_LOSS,
    MoodEventType.SUPER_BOWL_WIN,
    MoodEventType.SUPER_BOWL_LOSS,
}

# Descending ladder of (floor, mood).
_MOOD_LADDER = (
    (90, OwnerMood.ELATED),
    (75, OwnerMood.PLEASED),
    (60, OwnerMood.CONTENT),
    (45, OwnerMood.NEUTRAL),
    (35, OwnerMood.CONCERNED),
    (25, OwnerMood.FRUSTRATED),
    (15, OwnerMood.ANGRY),
)

_MOOD_DESCRIPTIONS: Dict[OwnerMood, str] = {
    OwnerMood.ELATED: "very happy",
    OwnerMood.PLEASED: "happy",
    OwnerMood.CONTENT: "satisfied",
    OwnerMood.NEUTRAL: "neutral",
    OwnerMood.CONCERNED: "concerned",
    OwnerMood.FRUSTRATED: "unhappy",
    OwnerMood.ANGRY: "very unhappy",
    OwnerMood.FURIOUS: "very unhappy",
}

OWNER_STATEMENTS: Dict[str, tuple] = {
    "praise": (
        '"I couldn\'t be happier with the direction of this franchise."',
        '"Our front office is doing an incredible job building this team."',
        '"This is exactly the kind of success I envisioned when I hired our GM."',
    ),
    "support": (
        '"We believe in our leadership and the plan we have in place."',
        '"I\'m confident in the decisions being made at the top."',
        '"Our GM has my full support as we continue building."',
    ),
    "concern": (
        '"We need to see improvement, and we need to see it soon."',
        '"I\'m not satisfied with where we are right now."',
        '"Changes may need to be made if things don\'t turn around."',
    ),
    "criticism": (
        '"The results have been unacceptable. We expect better."',
        '"I\'m very disappointed in our performance this season."',
        '"Our fans deserve better, and they\'re going to get it."',
    ),
    "warning": (
        '"Everyone\'s job is on the line. No one is safe."',
        '"If things don\'t change immediately, there will be consequences."',
        '"I\'ve seen enough. Major changes are coming."',
    ),
}


@dataclass
class MoodEvent:
    type: MoodEventType
    description: str
    mood_impact: int
    patience_impact: int
    trust_impact: int
    week: int
    season: int


@dataclass
class WeeklyMood:
    week: int
    mood: OwnerMood
    value: int


@dataclass
class OwnerMoodState:
    """Mood of one owner. ``current_mood`` is always derived from ``mood_value``."""

    mood_value: int = 50
    recent_events: List[MoodEvent] = field(default_factory=list)
    weekly_mood_history: List[WeeklyMood] = field(default_factory=list)
    satisfaction_streak: int = 0

    @property
    def current_mood(self) -> OwnerMood:
        return get_mood_from_value(self.mood_value)

    def to_dict(self) -> Dict[str, Any]:
        data = to_plain(self)
        data["current_mood"] = self.current_mood.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OwnerMoodState":
        return cls(
            mood_value=data.get("mood_value", 50),
            recent_events=[
                MoodEvent(
                    type=MoodEventType(item["type"]),
                    description=item["description"],
                    mood_impact=item["mood_impact"],
                    patience_impact=item["patience_impact"],
                    trust_impact=item["trust_impact"],
                    week=item["week"],
                    season=item["season"],
                )
                for item in data.get("recent_events", [])
            ],
            weekly_mood_history=[
                WeeklyMood(week=item["week"], mood=OwnerMood(item["mood"]), value=item["value"])
                for item in data.get("weekly_mood_history", [])
            ],
            satisfaction_streak=data.get("satisfaction_streak", 0),
        )


@dataclass
class MoodEventOutcome:
    """New mood state plus the owner values the caller should write back."""

    state: OwnerMoodState
    patience_meter: int
    trust_level: int

    def apply_to(self, owner: Owner) -> Owner:
        return replace(owner, patience_meter=self.patience_meter, trust_level=self.trust_level)


@dataclass
class PublicStatementTrigger:
    should_speak: bool
    type: Optional[str] = None


@dataclass
class RecentEventsSummary:
    positive_events: int
    negative_events: int
    neutral_events: int
    net_sentiment: str


@dataclass
class OwnerSentiment:
    mood: str
    trend: str
    outlook: str


def create_owner_mood_state() -> OwnerMoodState:
    return OwnerMoodState()


def get_mood_from_value(value: float) -> OwnerMood:
    for floor, mood in _MOOD_LADDER:
        if value >= floor:
            return mood
    return OwnerMood.FURIOUS


def get_mood_description(mood: OwnerMood) -> str:
    return _MOOD_DESCRIPTIONS[OwnerMood(mood)]


def apply_personality_modifiers(
    owner: Owner, event_type: MoodEventType, base: MoodImpact
) -> MoodImpact:
    traits = owner.personality.traits
    personality = owner.personality
    mood = float(base.mood)
    patience = float(base.patience)
    trust = float(base.trust)

    if base.mood < 0 and traits.patience > 60:
        damp = 1 - (traits.patience - 60) / 100 * 0.3
        mood *= damp
        patience *= damp
    if base.mood < 0 and traits.patience < 40:
        boost = 1 + (40 - traits.patience) / 100 * 0.4
        mood *= boost
        patience *= boost

    if personality.has_trait(SecondaryTrait.PR_OBSESSED):
        if event_type in _MEDIA_EVENTS:
            mood *= 1.5
            patience *= 1.3
        if event_type in _FAN_EVENTS:
            mood *= 1.4

    if (
        personality.has_trait(SecondaryTrait.WIN_NOW)
        or personality.has_trait(SecondaryTrait.CHAMPIONSHIP_OR_BUST)
    ) and event_type in _PLAYOFF_EVENTS:
        mood *= 1.5
        patience *= 1.3

    if traits.ego > 70 and event_type is MoodEventType.SCANDAL:
        mood *= 1.4
        trust *= 1.5

    if traits.loyalty > 70 and base.trust > 0:
        trust *= 1.3

    return MoodImpact(round_half_up(mood), round_half_up(patience), round_half_up(trust))


def create_mood_event(
    event_type: MoodEventType, description: str, owner: Owner, week: int, season: int
) -> MoodEvent:
    event_type = MoodEventType(event_type)
    impact = apply_personality_modifiers(owner, event_type, MOOD_EVENT_IMPACTS[event_type])
    return MoodEvent(
        type=event_type,
        description=description,
        mood_impact=impact.mood,
        patience_impact=impact.patience,
        trust_impact=impact.trust,
        week=week,
        season=season,
    )


def _next_streak(streak: int, impact: int) -> int:
    if impact > 0:
        return streak + 1 if streak >= 0 else 1
    if impact < 0:
        return streak - 1 if streak <= 0 else -1
    return streak


def process_mood_event(
    state: OwnerMoodState,
    owner: Owner,
    event: MoodEvent,
    recent_events_cap: int = 10,
    weekly_history_cap: int = 17,
) -> MoodEventOutcome:
    """Fold ``event`` into the mood state.

    The owner is not modified; the returned outcome carries the patience and
    trust values for the caller to apply.
    """

    value = int(clamp(state.mood_value + event.mood_impact, 0, 100))
    snapshot = WeeklyMood(week=event.week, mood=get_mood_from_value(value), value=value)
    new_state = OwnerMoodState(
        mood_value=value,
        recent_events=[*state.recent_events, event][-recent_events_cap:],
        weekly_mood_history=[*state.weekly_mood_history, snapshot][-weekly_history_cap:],
        satisfaction_streak=_next_streak(state.satisfaction_streak, event.mood_impact),
    )
    return MoodEventOutcome(
        state=new_state,
        patience_meter=apply_patience_change(owner.patience_meter, event.patience_impact),
        trust_level=int(clamp(owner.trust_level + event.trust_impact, 0, 100)),
    )


def apply_mood_decay(
    state: OwnerMoodState, decay_rate: float = 0.1, neutral_value: int = 50
) -> OwnerMoodState:
    """Pull the mood ``decay_rate`` of the way back toward neutral."""

    value = round_half_up(state.mood_value + (neutral_value - state.mood_value) * decay_rate)
    return replace(state, mood_value=value)


def get_mood_trend(state: OwnerMoodState) -> str:
    history = state.weekly_mood_history
    if len(history) < 3:
        return "stable"
    recent = history[-3:]
    average = sum(entry.value for entry in recent) / len(recent)
    first = recent[0].value
    if average > first + 5:
        return "improving"
    if average < first - 5:
        return "declining"
    return "stable"


def get_streak_description(streak: int) -> str:
    if streak >= 5:
        return "hot streak"
    if streak >= 2:
        return "doing well"
    if streak <= -5:
        return "cold streak"
    if streak <= -2:
        return "struggling"
    return "neutral"


def get_recent_events_summary(state: OwnerMoodState) -> RecentEventsSummary:
    positive = sum(1 for e in state.recent_events if e.mood_impact > 0)
    negative = sum(1 for e in state.recent_events if e.mood_impact < 0)
    neutral = len(state.recent_events) - positive - negative
    if positive > negative:
        sentiment = "positive"
    elif negative > positive:
        sentiment = "negative"
    else:
        sentiment = "neutral"
    return RecentEventsSummary(positive, negative, neutral, sentiment)


def get_owner_sentiment(state: OwnerMoodState) -> OwnerSentiment:
    trend = get_mood_trend(state)
    trend_text = {
        "improving": "Things are looking up",
        "declining": "Concerns are growing",
    }.get(trend, "Holding steady")

    if state.mood_value >= 70 and trend != "declining":
        outlook = "The owner is confident in your leadership"
    elif state.mood_value >= 50:
        outlook = "The owner is cautiously optimistic"
    elif state.mood_value >= 30:
        outlook = "The owner expects improvement"
    else:
        outlook = "The owner is losing patience"

    return OwnerSentiment(
        mood=get_mood_description(state.current_mood), trend=trend_text, outlook=outlook
    )


def should_make_public_statement(state: OwnerMoodState) -> PublicStatementTrigger:
    value = state.mood_value
    if value >= 85:
        return PublicStatementTrigger(True, "praise")
    if value >= 70 and state.satisfaction_streak >= 3:
        return PublicStatementTrigger(True, "support")
    if 20 < value <= 30:
        return PublicStatementTrigger(True, "concern")
    if 10 < value <= 20:
        return PublicStatementTrigger(True, "criticism")
    if value <= 10:
        return PublicStatementTrigger(True, "warning")
    return PublicStatementTrigger(False)


def generate_owner_statement(statement_type: str, rng: RandomSource) -> str:
    return pick(rng, OWNER_STATEMENTS[statement_type])


__all__ = [
    "MOOD_EVENT_IMPACTS",
    "MoodEvent",
    "MoodEventOutcome",
    "MoodEventType",
    "MoodImpact",
    "OWNER_STATEMENTS",
    "OwnerMood",
    "OwnerMoodState",
    "OwnerSentiment",
    "PublicStatementTrigger",
    "RecentEventsSummary",
    "WeeklyMood",
    "apply_mood_decay",
    "apply_personality_modifiers",
    "create_mood_event",
    "create_owner_mood_state",
    "generate_owner_statement",
    "get_mood_description",
    "get_mood_from_value",
    "get_mood_trend",
    "get_owner_sentiment",
    "get_recent_events_summary",
    "get_streak_description",
    "process_mood_event",
    "should_make_public_statement",
]
