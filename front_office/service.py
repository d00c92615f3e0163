"""Owner relationship service driving one team's front office week to week."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from .config import Settings, get_settings
from .models import (
    Owner,
    OwnerDemand,
    TeamState,
    add_owner_demand,
    remove_owner_demand,
)
from .patience import JobSecurityLevel, get_job_security_level
from .rng import DeterministicRNG, RandomSource
from .services.demands import CompletedAction, DemandContext, generate_demand, is_demand_satisfied
from .services.expectations import (
    ExpectationsState,
    SeasonEvaluation,
    SeasonOutcome,
    TeamPhase,
    advance_expectations,
    create_expectations_state,
    evaluate_season_expectations,
)
from .services.interference import (
    ComplianceStatus,
    InterferenceConsequence,
    InterferenceState,
    InterventionTrigger,
    apply_interference_consequence,
    calculate_compliance_consequence,
    calculate_defiance_consequence,
    check_expired_demands,
    create_interference_state,
    detect_all_interventions,
    get_most_severe_trigger,
    record_compliance,
    record_defiance,
    should_generate_demand,
    track_new_demand,
)
from .services.mood import (
    MoodEvent,
    MoodEventType,
    OwnerMoodState,
    apply_mood_decay,
    create_mood_event,
    create_owner_mood_state,
    generate_owner_statement,
    process_mood_event,
    should_make_public_statement,
)
from .services.patience_events import (
    PatienceEventResult,
    SeasonResultContext,
    process_season_end,
)
from .services.patience_meter import (
    PatienceMeterState,
    create_from_owner,
    start_new_season,
    sync_with_owner,
    update_patience_value,
)

logger = logging.getLogger(__name__)


@dataclass
class WeekReport:
    season: int
    week: int
    expired_demands: List[OwnerDemand] = field(default_factory=list)
    triggers: List[InterventionTrigger] = field(default_factory=list)
    new_demand: Optional[OwnerDemand] = None
    owner_statement: Optional[str] = None
    security_level: JobSecurityLevel = JobSecurityLevel.STABLE
    gm_fired: bool = False


@dataclass
class SeasonReport:
    season: int
    patience_results: List[PatienceEventResult]
    evaluation: SeasonEvaluation
    expired_demands: List[OwnerDemand] = field(default_factory=list)
    security_level: JobSecurityLevel = JobSecurityLevel.STABLE
    gm_fired: bool = False


class OwnerRelationsService:
    """Keeps one owner's patience, trust, mood, demands and expectations in step.

    The owner record is authoritative for patience and trust; the patience
    meter mirrors every change so its history stays complete.
    """

    def __init__(
        self,
        owner: Owner,
        rng: RandomSource | None = None,
        settings: Settings | None = None,
        season: int = 1,
        expectations: ExpectationsState | None = None,
        interference: InterferenceState | None = None,
        mood: OwnerMoodState | None = None,
        patience: PatienceMeterState | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._rng = rng or DeterministicRNG(self.settings.campaign_seed)
        self.owner = owner
        self.season = season
        self.expectations = expectations
        self.interference = interference or create_interference_state(owner.team_id)
        self.mood = mood or create_owner_mood_state()
        self.patience = patience or create_from_owner(owner, current_week=1, current_season=season)
        self._current_week = 1

    # --- state helpers -----------------------------------------------------

    @property
    def security_level(self) -> JobSecurityLevel:
        return get_job_security_level(self.owner.patience_meter)

    @property
    def gm_fired(self) -> bool:
        return self.security_level is JobSecurityLevel.FIRED

    def _set_owner(self, owner: Owner, week: int, description: str) -> None:
        delta = owner.patience_meter - self.owner.patience_meter
        previous_level = self.security_level
        self.owner = owner
        if delta:
            self.patience = update_patience_value(
                self.patience,
                delta,
                week,
                self.season,
                description,
                self.settings.patience_history_cap,
            )
        if self.security_level is not previous_level:
            logger.info(
                "Job security for %s moved from %s to %s (%s)",
                self.owner.team_id,
                previous_level.value,
                self.security_level.value,
                description,
            )
            if self.gm_fired:
                logger.info("GM of %s fired in season %s week %s", self.owner.team_id, self.season, week)

    def _apply_defiance(self, demand: OwnerDemand, consecutive: int, week: int) -> InterferenceConsequence:
        consequence = calculate_defiance_consequence(
            self.owner, demand.type, consecutive, self.owner.patience_meter
        )
        owner = apply_interference_consequence(self.owner, consequence)
        self._set_owner(remove_owner_demand(owner, demand.id), week, consequence.description)
        return consequence

    def _expire(self, demands: Sequence[OwnerDemand], prior_consecutive: int, week: int) -> None:
        for offset, demand in enumerate(demands):
            logger.info("Demand %s expired unanswered (%s)", demand.id, demand.description)
            self._apply_defiance(demand, prior_consecutive + offset, week)

    def _expire_outstanding(self, week: int) -> List[OwnerDemand]:
        """Treat every still-pending demand as expired; used when the season closes."""

        outstanding: List[OwnerDemand] = []
        prior = self.interference.consecutive_defiances
        for demand in self.owner.active_demands:
            record = self.interference.record_for(demand.id)
            if record is not None and record.status is not ComplianceStatus.PENDING:
                continue
            outstanding.append(demand)
            self.interference = record_defiance(
                self.interference,
                demand.id,
                week,
                self.settings.compliance_history_cap,
                status=ComplianceStatus.EXPIRED,
            )
        self._expire(outstanding, prior, week)
        return outstanding

    # --- weekly loop -------------------------------------------------------

    def configure_expectations(
        self, team_phase: TeamPhase, previous_season_wins: int, roster_strength: float
    ) -> ExpectationsState:
        self.expectations = create_expectations_state(
            self.owner,
            self.owner.team_id,
            self.season,
            team_phase,
            previous_season_wins,
            roster_strength,
        )
        return self.expectations

    def process_week(self, team_state: TeamState, context: DemandContext | None = None) -> WeekReport:
        week = team_state.current_week
        self._current_week = week
        report = WeekReport(season=self.season, week=week)

        prior = self.interference.consecutive_defiances
        expired, self.interference = check_expired_demands(
            self.owner, self.interference, week, self.settings.compliance_history_cap
        )
        self._expire(expired, prior, week)
        report.expired_demands = expired

        if not self.gm_fired:
            triggers = detect_all_interventions(self.owner, team_state, self.interference, self._rng)
            report.triggers = triggers
            logger.debug(
                "Week %s triggers for %s: %s",
                week,
                self.owner.team_id,
                [trigger.type.value for trigger in triggers],
            )
            if should_generate_demand(self.owner, triggers, bool(self.owner.active_demands), self._rng):
                demand_context = context or DemandContext(current_week=week, current_season=self.season)
                demand_context = replace(
                    demand_context, current_week=week, current_season=self.season, team_state=team_state
                )
                demand = generate_demand(
                    self.owner, demand_context, get_most_severe_trigger(triggers), self._rng
                )
                if demand is not None:
                    self.owner = add_owner_demand(self.owner, demand)
                    self.interference = track_new_demand(
                        self.interference, demand, week, self.settings.compliance_history_cap
                    )
                    report.new_demand = demand
                    logger.info(
                        "Owner of %s issued demand %s: %s (deadline week %s)",
                        self.owner.team_id,
                        demand.id,
                        demand.description,
                        demand.deadline,
                    )

        self.mood = apply_mood_decay(
            self.mood, self.settings.mood_decay_rate, self.settings.mood_neutral_value
        )
        statement = should_make_public_statement(self.mood)
        if statement.should_speak and statement.type is not None:
            report.owner_statement = generate_owner_statement(statement.type, self._rng)

        report.security_level = self.security_level
        report.gm_fired = self.gm_fired
        return report

    def record_mood_event(
        self, event_type: MoodEventType, description: str, week: int | None = None
    ) -> MoodEvent:
        week = self._current_week if week is None else week
        event = create_mood_event(event_type, description, self.owner, week, self.season)
        outcome = process_mood_event(
            self.mood,
            self.owner,
            event,
            self.settings.mood_recent_events_cap,
            self.settings.mood_weekly_history_cap,
        )
        self.mood = outcome.state
        self._set_owner(outcome.apply_to(self.owner), week, description)
        return event

    def resolve_demand(self, demand_id: str, complied: bool, week: int | None = None) -> InterferenceConsequence:
        week = self._current_week if week is None else week
        demand = next((d for d in self.owner.active_demands if d.id == demand_id), None)
        if demand is None:
            raise ValueError(f"Owner of {self.owner.team_id} has no active demand {demand_id}")

        if not complied:
            prior = self.interference.consecutive_defiances
            self.interference = record_defiance(
                self.interference, demand_id, week, self.settings.compliance_history_cap
            )
            logger.info("GM defied demand %s", demand_id)
            return self._apply_defiance(demand, prior, week)

        consequence = calculate_compliance_consequence(self.owner, demand.type)
        self.interference = record_compliance(
            self.interference, demand_id, week, self.settings.compliance_history_cap
        )
        owner = apply_interference_consequence(self.owner, consequence)
        self._set_owner(remove_owner_demand(owner, demand_id), week, consequence.description)
        logger.info("GM complied with demand %s", demand_id)
        return consequence

    def complete_actions(self, actions: Sequence[CompletedAction], week: int | None = None) -> List[str]:
        """Resolve every active demand the actions satisfy; returns their ids."""

        satisfied = [d.id for d in self.owner.active_demands if is_demand_satisfied(d, actions)]
        for demand_id in satisfied:
            self.resolve_demand(demand_id, complied=True, week=week)
        return satisfied

    # --- season boundary ---------------------------------------------------

    def end_season(
        self,
        outcome: SeasonOutcome,
        losses: int,
        playoff_result: Optional[str] = None,
        new_team_phase: TeamPhase | None = None,
        new_roster_strength: float = 50,
    ) -> SeasonReport:
        """Close the season: sweep demands, score patience events, roll expectations forward.

        ``playoff_result`` is a playoff result key or ``"missedPlayoffs"``.
        """

        if self.expectations is None:
            raise ValueError("Season expectations have not been configured for this owner")

        week = self.settings.end_of_season_week
        expired = self._expire_outstanding(week)

        context = SeasonResultContext(
            wins=outcome.wins,
            losses=losses,
            expected_wins=self.expectations.short_term.target_wins,
            season=self.season,
            playoff_result=playoff_result,
        )
        results = process_season_end(
            context,
            self.patience,
            self.owner,
            self._rng,
            self.settings.end_of_season_week,
            self.settings.patience_history_cap,
        )
        previous_level = self.security_level
        if results:
            self.patience = results[-1].new_state
            self.owner = sync_with_owner(self.patience, self.owner)
        if self.security_level is not previous_level:
            logger.info(
                "Season %s close moved %s job security from %s to %s",
                self.season,
                self.owner.team_id,
                previous_level.value,
                self.security_level.value,
            )

        evaluation = evaluate_season_expectations(self.expectations.short_term, outcome)
        logger.info(
            "Season %s for %s: %s (score %.0f, owner %s)",
            self.season,
            self.owner.team_id,
            evaluation.summary,
            evaluation.score,
            evaluation.reaction,
        )
        self.expectations = advance_expectations(
            self.expectations,
            outcome,
            self.owner,
            new_team_phase or self.expectations.long_term.phase,
            new_roster_strength,
            self.settings.expectations_history_cap,
        )

        self.owner = replace(
            self.owner,
            years_as_owner=self.owner.years_as_owner + 1,
            championships_won=self.owner.championships_won + (1 if playoff_result == "superBowlWin" else 0),
        )
        report = SeasonReport(
            season=self.season,
            patience_results=results,
            evaluation=evaluation,
            expired_demands=expired,
            security_level=self.security_level,
            gm_fired=self.gm_fired,
        )

        self.season += 1
        self._current_week = 1
        self.patience = start_new_season(self.patience)
        self.interference = replace(self.interference, last_intervention_week=None)
        return report

    # --- persistence -------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        return {
            "season": self.season,
            "owner": self.owner.to_dict(),
            "interference": self.interference.to_dict(),
            "mood": self.mood.to_dict(),
            "patience": self.patience.to_dict(),
            "expectations": self.expectations.to_dict() if self.expectations else None,
        }

    @classmethod
    def from_snapshot(
        cls,
        data: Dict[str, Any],
        rng: RandomSource | None = None,
        settings: Settings | None = None,
    ) -> "OwnerRelationsService":
        expectations = data.get("expectations")
        return cls(
            Owner.from_dict(data["owner"]),
            rng=rng,
            settings=settings,
            season=data.get("season", 1),
            expectations=ExpectationsState.from_dict(expectations) if expectations else None,
            interference=InterferenceState.from_dict(data["interference"]),
            mood=OwnerMoodState.from_dict(data["mood"]),
            patience=PatienceMeterState.from_dict(data["patience"]),
        )


__all__ = ["OwnerRelationsService", "SeasonReport", "WeekReport"]
