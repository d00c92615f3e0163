"""Seeded multi-season owner relationship simulator."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..config import Settings, get_settings
from ..models import (
    ExpectationTier,
    PerformanceTier,
    TeamContext,
    TeamState,
    clamp,
)
from ..rng import DeterministicRNG, pick, random_int
from ..service import OwnerRelationsService
from ..services.demands import CoachInfo, CompletedAction, DemandContext, PlayerInfo, ProspectInfo
from ..services.expectations import PlayoffRound, SeasonOutcome, TeamPhase, determine_team_phase
from ..services.mood import MoodEventType
from ..services.ownership import (
    check_league_ownership_changes,
    create_league_ownership_state,
    get_ownership_change_summary,
    initialize_team_ownership,
)
from ..views import create_owner_view_model

logger = logging.getLogger(__name__)

TEAM_ID = "team-1"

_PHASE_TIERS = {
    TeamPhase.REBUILD: ExpectationTier.REBUILD,
    TeamPhase.DEVELOPING: ExpectationTier.DEVELOPING,
    TeamPhase.COMPETITIVE: ExpectationTier.COMPETITIVE,
    TeamPhase.CONTENDER: ExpectationTier.CONTENDER,
    TeamPhase.DYNASTY: ExpectationTier.CHAMPIONSHIP,
}

# Playoff key for the round a team was knocked out in (or won).
_PLAYOFF_EXITS = [
    ("wildCardLoss", PlayoffRound.WILD_CARD),
    ("divisionalLoss", PlayoffRound.DIVISIONAL),
    ("conferenceChampionshipLoss", PlayoffRound.CONFERENCE),
    ("superBowlLoss", PlayoffRound.SUPER_BOWL),
    ("superBowlWin", PlayoffRound.SUPER_BOWL),
]

_POSITIONS = ["QB", "RB", "WR", "TE", "OL", "DL", "LB", "CB", "S"]


@dataclass
class _WeekState:
    wins: int = 0
    losses: int = 0
    streak: int = 0
    fan_approval: int = 55
    media_scrutiny: int = 40


def _demand_pool(rng: DeterministicRNG, season: int) -> DemandContext:
    def player(prefix: str, index: int, **extra: Any) -> PlayerInfo:
        return PlayerInfo(
            id=f"{prefix}-{season}-{index}",
            first_name=f"{prefix.title()}{index}",
            last_name="Player",
            position=pick(rng, _POSITIONS),
            overall=random_int(rng, 60, 92),
            **extra,
        )

    return DemandContext(
        current_week=1,
        current_season=season,
        available_players=[player("fa", i, is_free_agent=True) for i in range(4)],
        trade_targets=[player("trade", i, is_star=i == 0) for i in range(3)],
        team_roster=[player("roster", i, is_starter=True, is_struggling=i == 0) for i in range(5)],
        available_coaches=[
            CoachInfo(f"coach-oc-{season}", "Ollie", "Coord", "offensiveCoordinator", 0.45, 2, True),
            CoachInfo(f"coach-dc-{season}", "Dana", "Coord", "defensiveCoordinator", 0.55, 3),
        ],
        draft_prospects=[
            ProspectInfo(f"prospect-{season}-{i}", f"Prospect{i}", "Draftee", pick(rng, _POSITIONS), 1, "star")
            for i in range(3)
        ],
    )


def _play_game(rng: DeterministicRNG, roster_strength: float) -> bool:
    return rng.random() < clamp(0.2 + roster_strength / 125, 0.1, 0.9)


def _simulate_season(
    service: OwnerRelationsService,
    rng: DeterministicRNG,
    settings: Settings,
    roster_strength: float,
    compliance_rate: float,
) -> Dict[str, Any]:
    phase = service.expectations.long_term.phase if service.expectations else TeamPhase.COMPETITIVE
    pool = _demand_pool(rng, service.season)
    week_state = _WeekState()
    weekly: List[Dict[str, Any]] = []

    for week in range(1, settings.season_weeks + 1):
        won = _play_game(rng, roster_strength)
        margin = random_int(rng, 1, 28)
        if won:
            week_state.wins += 1
            week_state.streak = 0
            week_state.fan_approval = int(clamp(week_state.fan_approval + 3, 0, 100))
            week_state.media_scrutiny = int(clamp(week_state.media_scrutiny - 2, 0, 100))
            event = MoodEventType.BLOWOUT_WIN if margin >= 21 else MoodEventType.WIN
        else:
            week_state.losses += 1
            week_state.streak += 1
            week_state.fan_approval = int(clamp(week_state.fan_approval - 4, 0, 100))
            week_state.media_scrutiny = int(clamp(week_state.media_scrutiny + 4, 0, 100))
            event = MoodEventType.BLOWOUT_LOSS if margin >= 21 else MoodEventType.LOSS
        service.record_mood_event(event, f"Week {week}: {'won' if won else 'lost'} by {margin}", week)

        team_state = TeamState(
            current_losing_streak=week_state.streak,
            fan_approval=week_state.fan_approval,
            media_scrutiny=week_state.media_scrutiny,
            season_wins=week_state.wins,
            season_losses=week_state.losses,
            current_week=week,
            season_expectation=_PHASE_TIERS[phase],
        )
        report = service.process_week(team_state, pool)

        for demand in list(service.owner.active_demands):
            if demand.issued_week == week:
                continue
            if rng.random() < compliance_rate:
                service.complete_actions([CompletedAction(demand.type, demand.target_id)], week)

        weekly.append(
            {
                "week": week,
                "won": won,
                "patience": service.owner.patience_meter,
                "mood": service.mood.current_mood.value,
                "new_demand": report.new_demand.description if report.new_demand else None,
                "expired": [d.id for d in report.expired_demands],
                "statement": report.owner_statement,
            }
        )
        if report.gm_fired:
            logger.info("GM fired during season %s week %s", service.season, week)
            return {"weekly": weekly, "wins": week_state.wins, "losses": week_state.losses, "fired": True}

    return {"weekly": weekly, "wins": week_state.wins, "losses": week_state.losses, "fired": False}


def _playoffs(rng: DeterministicRNG, wins: int) -> Tuple[str, PlayoffRound]:
    if wins < 10:
        return "missedPlayoffs", PlayoffRound.NONE
    depth = min(len(_PLAYOFF_EXITS) - 1, int(rng.random() * (wins - 8)))
    return _PLAYOFF_EXITS[depth]


def run_simulation(
    *,
    seasons: int,
    seed: int,
    output_dir: Optional[Path] = None,
    settings: Settings | None = None,
    compliance_rate: float = 0.6,
) -> Dict[str, Any]:
    """Run a seeded career returning a per-season timeline and final snapshot."""

    settings = settings or get_settings()
    rng = DeterministicRNG(seed)
    league = initialize_team_ownership(
        create_league_ownership_state(), TEAM_ID, TeamContext(team_id=TEAM_ID), 1, rng.spawn(1)
    )
    service = OwnerRelationsService(league.owners[TEAM_ID], rng=rng.spawn(2), settings=settings)
    roster_strength = 50.0
    previous_wins = 8
    playoff_trips: List[bool] = []
    timeline: List[Dict[str, Any]] = []
    status = "active"

    for _ in range(seasons):
        if service.expectations is None:
            phase = determine_team_phase(previous_wins, roster_strength, sum(playoff_trips[-3:]))
            service.configure_expectations(phase, previous_wins, roster_strength)
        season = service.season
        season_result = _simulate_season(service, rng, settings, roster_strength, compliance_rate)
        entry: Dict[str, Any] = {
            "season": season,
            "owner": service.owner.full_name,
            "wins": season_result["wins"],
            "losses": season_result["losses"],
            "weekly": season_result["weekly"],
        }
        if season_result["fired"]:
            entry["fired"] = True
            timeline.append(entry)
            status = "fired"
            break

        playoff_key, playoff_round = _playoffs(rng, season_result["wins"])
        made_playoffs = playoff_key != "missedPlayoffs"
        playoff_trips.append(made_playoffs)
        roster_strength = clamp(roster_strength + (season_result["wins"] - 8.5) * 1.5 + rng.random() * 6 - 3, 10, 95)
        new_phase = determine_team_phase(season_result["wins"], roster_strength, sum(playoff_trips[-3:]))
        outcome = SeasonOutcome(
            wins=season_result["wins"],
            made_playoffs=made_playoffs,
            playoff_round=playoff_round,
            goals_achieved=[
                goal.id
                for goal in service.expectations.short_term.priority_goals
                if rng.random() < 0.5
            ],
        )
        report = service.end_season(
            outcome, season_result["losses"], playoff_key, new_phase, roster_strength
        )
        previous_wins = season_result["wins"]
        entry.update(
            {
                "playoffs": playoff_key,
                "evaluation": report.evaluation.summary,
                "owner_reaction": report.evaluation.reaction,
                "security": report.security_level.value,
            }
        )
        timeline.append(entry)
        if report.gm_fired:
            status = "fired"
            break

        performance = PerformanceTier.GOOD if previous_wins >= 10 else (
            PerformanceTier.POOR if previous_wins <= 5 else PerformanceTier.AVERAGE
        )
        league = replace(
            league,
            owners={**league.owners, TEAM_ID: service.owner},
            team_contexts={
                **league.team_contexts,
                TEAM_ID: replace(league.team_contexts[TEAM_ID], recent_performance=performance),
            },
        )
        league, changes = check_league_ownership_changes(
            league,
            season,
            {TEAM_ID: performance},
            rng,
            history_cap=settings.ownership_history_cap,
            base=settings.ownership_change_base,
            per_year=settings.ownership_change_per_year,
            cap=settings.ownership_change_cap,
        )
        for change in changes:
            summary = get_ownership_change_summary(change)
            entry["ownership_change"] = {"headline": summary.headline, "gm_status": summary.gm_status}
            if not change.gm_retained:
                status = "replaced_by_new_owner"
                break
            service = OwnerRelationsService(
                league.owners[TEAM_ID], rng=rng.spawn(season + 2), settings=settings, season=service.season
            )
        if status != "active":
            break

    result: Dict[str, Any] = {
        "seed": seed,
        "seasons_requested": seasons,
        "seasons_played": len(timeline),
        "status": status,
        "timeline": timeline,
        "owner": create_owner_view_model(service.owner).to_dict(),
        "final_state": service.snapshot(),
        "ownership_history": [event.type.value for event in league.ownership_history],
    }

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        output_path = output_dir / f"owner_career_{seed}_{timestamp}.json"
        output_path.write_text(json.dumps(result, indent=2), encoding="utf-8")
        result["output_path"] = str(output_path)

    return result


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate a GM career under a generated owner.")
    parser.add_argument("--seasons", type=int, default=5, help="Number of seasons to simulate (default: 5).")
    parser.add_argument("--seed", type=int, help="Campaign seed (default: settings campaign_seed).")
    parser.add_argument("--output-dir", type=Path, help="Directory for the JSON summary.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    seed = args.seed if args.seed is not None else settings.campaign_seed
    result = run_simulation(seasons=args.seasons, seed=seed, output_dir=args.output_dir, settings=settings)
    summary = {key: result[key] for key in ("seed", "seasons_played", "status", "owner")}
    summary["seasons"] = [
        {key: value for key, value in entry.items() if key != "weekly"} for entry in result["timeline"]
    ]
    if "output_path" in result:
        summary["output_path"] = result["output_path"]
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    main()
