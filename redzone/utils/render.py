"""Rendering helpers using Rich."""

from __future__ import annotations

from datetime import tzinfo
from typing import List, Optional, Sequence

from rich.markup import escape
from rich.table import Table

from redzone.models import (
    EspnCompetitor,
    EspnGame,
    GameConfig,
    GamePlayers,
    LeagueLineup,
    LineupEntry,
    RosterLineup,
    TeamPlayers,
)
from redzone.schedule.game_filter import classify_window, keyboard_label, local_kickoff


def _team_label(competitor: Optional[EspnCompetitor]) -> str:
    if competitor is None:
        return "TBD"
    record = competitor.record_summary
    label = competitor.team.abbreviation or "TBD"
    return f"{label} ({record})" if record else label


def _game_status(game: EspnGame) -> str:
    competition = game.competition
    if competition is None or competition.status is None or competition.status.type is None:
        return ""
    return competition.status.type.short_detail or competition.status.type.name or ""


def _game_score(game: EspnGame) -> str:
    away, home = game.away_team, game.home_team
    if away is None or home is None or away.score is None or home.score is None:
        return "-"
    return f"{away.score}-{home.score}"


def matchup_label(game: EspnGame) -> str:
    return f"{_team_label(game.away_team)} @ {_team_label(game.home_team)}"


def render_games_table(
    games: Sequence[EspnGame],
    week: Optional[int] = None,
    selected_index: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> Table:
    """Visible games with their keyboard keys; the selected one is highlighted."""
    title = f"Week {week} Games" if week else "Games"
    table = Table(title=title)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Matchup", justify="left")
    table.add_column("Kickoff", justify="left")
    table.add_column("Score", justify="center")
    table.add_column("Status", justify="left")

    for index, game in enumerate(games):
        kickoff = local_kickoff(game, tz).strftime("%a %H:%M")
        style = "bold green" if index == selected_index else None
        table.add_row(
            keyboard_label(index),
            matchup_label(game),
            kickoff,
            _game_score(game),
            _game_status(game),
            style=style,
        )
    return table


def render_game_config_table(
    configs: Sequence[GameConfig],
    games: Sequence[EspnGame],
    tz: Optional[tzinfo] = None,
) -> Table:
    """Every game with its visibility and window, in configured order."""
    by_id = {game.id: game for game in games}
    table = Table(title="Game Configuration")
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Matchup", justify="left")
    table.add_column("Window", justify="center")
    table.add_column("Visible", justify="center")

    for index, config in enumerate(configs):
        game = by_id.get(config.game_id)
        if game is None:
            continue
        window = classify_window(game, tz) or "-"
        visible = "[green]yes[/green]" if config.is_visible else "[red]hidden[/red]"
        table.add_row(
            keyboard_label(index),
            config.custom_label or matchup_label(game),
            window,
            visible,
        )
    return table


def _player_label(entry: LineupEntry) -> str:
    number = f"#{entry.jersey_number} " if entry.jersey_number else ""
    return f"{number}{entry.name}"


def render_lineup_table(entries: Sequence[LineupEntry], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Player", justify="left")
    table.add_column("Pos", justify="center")
    table.add_column("Team", justify="center")
    table.add_column("Side", justify="center")
    table.add_column("Leagues", justify="left")

    for entry in entries:
        side = "[red]Opp[/red]" if entry.is_opponent else "[green]Mine[/green]"
        table.add_row(
            _player_label(entry),
            entry.position,
            entry.team,
            side,
            escape(", ".join(entry.league_names)),
        )
    return table


def _team_players_table(title: str, players: TeamPlayers) -> Table:
    table = Table(title=title)
    table.add_column("My Players", justify="left", style="green")
    table.add_column("Opponents", justify="left", style="red")

    mine = [
        escape(f"{_player_label(e)} ({e.position}) [{', '.join(e.league_names)}]")
        for e in players.my_players
    ]
    theirs = [
        escape(f"{_player_label(e)} ({e.position}) [{', '.join(e.league_names)}]")
        for e in players.opponents
    ]
    for index in range(max(len(mine), len(theirs))):
        table.add_row(
            mine[index] if index < len(mine) else "",
            theirs[index] if index < len(theirs) else "",
        )
    if not mine and not theirs:
        table.add_row("[dim]No players[/dim]", "")
    return table


def render_game_players(game: EspnGame, players: GamePlayers) -> List[Table]:
    """One table per team (away first), each split into mine vs opponents."""
    away = game.away_team.team.abbreviation if game.away_team else "Away"
    home = game.home_team.team.abbreviation if game.home_team else "Home"
    return [
        _team_players_table(f"{away} (away)", players.away),
        _team_players_table(f"{home} (home)", players.home),
    ]


def _roster_rows(side: Optional[RosterLineup]) -> List[str]:
    if side is None:
        return []
    return [f"{p.position} {p.name} ({p.team})" for p in side.starters]


def render_league_lineup(lineup: LeagueLineup) -> Table:
    """Both sides of one league's matchup; a bye shows only the user's side."""
    table = Table(title=lineup.league_name)
    table.add_column(lineup.user_side.owner, justify="left", style="green")
    opponent = lineup.opponent_side.owner if lineup.opponent_side else "Bye"
    table.add_column(opponent, justify="left", style="red")

    mine = _roster_rows(lineup.user_side)
    theirs = _roster_rows(lineup.opponent_side)
    for index in range(max(len(mine), len(theirs))):
        table.add_row(
            mine[index] if index < len(mine) else "",
            theirs[index] if index < len(theirs) else "",
        )
    return table
