"""Player reference lookups for lineup building."""

from __future__ import annotations

from typing import Iterable, List, Optional

from redzone.models import LineupEntry, LineupPlayer, PlayerTable, SleeperPlayer


def lineup_player(player_id: str, player: SleeperPlayer) -> LineupPlayer:
    """Display fields for a starter; missing position/team fall back to N/A/FA."""
    return LineupPlayer(
        player_id=player_id,
        name=player.full_name,
        position=player.position or "N/A",
        team=player.team or "FA",
        jersey_number=player.jersey_number,
    )


def resolve_starters(
    starter_ids: Optional[Iterable[str]], player_index: PlayerTable
) -> List[LineupPlayer]:
    """Starters present in ``player_index``; empty slots and unknown ids are skipped."""
    players = []
    for player_id in starter_ids or []:
        player = player_index.get(player_id) if player_id else None
        if player is None:
            continue
        players.append(lineup_player(player_id, player))
    return players


def referenced_player_ids(lineups: Iterable[LineupEntry]) -> List[str]:
    """Unique player ids in first-seen order."""
    seen = dict.fromkeys(entry.player_id for entry in lineups)
    return list(seen)
