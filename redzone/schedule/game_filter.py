"""Game visibility/ordering, kickoff windows and per-game player partitions."""

from __future__ import annotations

import string
from collections import defaultdict
from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from redzone.config import settings
from redzone.models import EspnGame, GameConfig, GamePlayers, LineupEntry

WINDOW_FILTERS = ("all", "early", "late", "early+late")

# Local kickoff constants for the Sunday windows
SUNDAY = 6  # datetime.weekday()
EARLY_KICKOFFS = ((19, 0), (20, 0))
LATE_START_HOUR = 22
LATE_END_HOUR = 23
LATE_LAST_MINUTE = 50

KEYBOARD_KEYS = "123456789" + string.ascii_uppercase


def default_config(game: EspnGame, index: int) -> GameConfig:
    return GameConfig(game_id=game.id, is_visible=True, custom_order=index)


def default_configs(games: Sequence[EspnGame]) -> List[GameConfig]:
    """Every game visible, in original order."""
    return [default_config(game, index) for index, game in enumerate(games)]


def apply_config(
    games: Sequence[EspnGame], configs: Sequence[GameConfig]
) -> List[EspnGame]:
    """Hide and reorder games per the user's configuration.

    Games without a stored config are visible at their original index. If
    nothing is configured, or the configuration hides every game, all games
    are returned in original order rather than an empty slate.
    """
    if not games:
        return []
    if not configs:
        return list(games)

    lookup = {config.game_id: config for config in configs}
    resolved = [
        (lookup.get(game.id) or default_config(game, index), game)
        for index, game in enumerate(games)
    ]
    visible = [pair for pair in resolved if pair[0].is_visible]
    if not visible:
        return list(games)

    visible.sort(key=lambda pair: pair[0].custom_order)
    return [game for _, game in visible]


def ordered_configs(
    games: Sequence[EspnGame], configs: Sequence[GameConfig]
) -> List[GameConfig]:
    """Editable config list: one entry per game, sorted by custom order."""
    lookup = {config.game_id: config for config in configs}
    merged = [
        lookup.get(game.id) or default_config(game, index)
        for index, game in enumerate(games)
    ]
    return sorted(merged, key=lambda config: config.custom_order)


def renumber(configs: Sequence[GameConfig]) -> List[GameConfig]:
    """Make ``custom_order`` match list position (applied on save)."""
    return [
        config.model_copy(update={"custom_order": index})
        for index, config in enumerate(configs)
    ]


def toggle_visibility(
    configs: Sequence[GameConfig], game_id: str, visible: Optional[bool] = None
) -> List[GameConfig]:
    updated = []
    for config in configs:
        if config.game_id == game_id:
            value = (not config.is_visible) if visible is None else visible
            config = config.model_copy(update={"is_visible": value})
        updated.append(config)
    return updated


def move_config(
    configs: Sequence[GameConfig], game_id: str, position: int
) -> List[GameConfig]:
    """Move one game to ``position`` (clamped) and renumber."""
    remaining = [config for config in configs if config.game_id != game_id]
    moving = [config for config in configs if config.game_id == game_id]
    if not moving:
        return list(configs)
    position = max(0, min(position, len(remaining)))
    remaining.insert(position, moving[0])
    return renumber(remaining)


def _local_zone() -> Optional[tzinfo]:
    return ZoneInfo(settings.local_timezone) if settings.local_timezone else None


def local_kickoff(game: EspnGame, tz: Optional[tzinfo] = None) -> datetime:
    """Kickoff converted to ``tz`` (system local time when None)."""
    return game.kickoff.astimezone(tz or _local_zone())


def is_early_window(game: EspnGame, tz: Optional[tzinfo] = None) -> bool:
    kickoff = local_kickoff(game, tz)
    return kickoff.weekday() == SUNDAY and (kickoff.hour, kickoff.minute) in EARLY_KICKOFFS


def is_late_window(game: EspnGame, tz: Optional[tzinfo] = None) -> bool:
    kickoff = local_kickoff(game, tz)
    return (
        kickoff.weekday() == SUNDAY
        and LATE_START_HOUR <= kickoff.hour <= LATE_END_HOUR
        and kickoff.minute <= LATE_LAST_MINUTE
    )


def classify_window(game: EspnGame, tz: Optional[tzinfo] = None) -> Optional[str]:
    """Label a game "early", "late" or None from its local kickoff."""
    if is_early_window(game, tz):
        return "early"
    if is_late_window(game, tz):
        return "late"
    return None


def apply_window_filter(
    configs: Sequence[GameConfig],
    games: Sequence[EspnGame],
    window: str,
    tz: Optional[tzinfo] = None,
) -> List[GameConfig]:
    """Batch-set visibility so only games in ``window`` are shown."""
    if window not in WINDOW_FILTERS:
        raise ValueError(
            f"Unknown window '{window}'. Expected one of: {', '.join(WINDOW_FILTERS)}"
        )

    by_id = {game.id: game for game in games}
    updated = []
    for config in configs:
        game = by_id.get(config.game_id)
        if game is None:
            updated.append(config)
            continue
        label = classify_window(game, tz)
        if window == "all":
            visible = True
        elif window == "early+late":
            visible = label is not None
        else:
            visible = label == window
        updated.append(config.model_copy(update={"is_visible": visible}))
    return updated


def keyboard_label(index: int) -> str:
    """1-9 for the first nine games, then A-Z."""
    if 0 <= index < len(KEYBOARD_KEYS):
        return KEYBOARD_KEYS[index]
    return ""


def index_for_key(key: str, count: int) -> Optional[int]:
    """Inverse of :func:`keyboard_label`; None when out of range."""
    if len(key) != 1:
        return None
    position = KEYBOARD_KEYS.find(key.upper())
    if position < 0 or position >= count:
        return None
    return position


def players_for_game(game: EspnGame, lineups: Iterable[LineupEntry]) -> GamePlayers:
    """Split lineup entries by home/away team, then mine vs opponent."""
    result = GamePlayers()
    home = game.home_team.team.abbreviation if game.home_team else ""
    away = game.away_team.team.abbreviation if game.away_team else ""
    if not home and not away:
        return result

    for entry in lineups:
        if home and entry.team == home:
            side = result.home
        elif away and entry.team == away:
            side = result.away
        else:
            continue
        if entry.is_opponent:
            side.opponents.append(entry)
        else:
            side.my_players.append(entry)
    return result


def group_by_team(lineups: Iterable[LineupEntry]) -> Dict[str, List[LineupEntry]]:
    grouped: Dict[str, List[LineupEntry]] = defaultdict(list)
    for entry in lineups:
        grouped[entry.team].append(entry)
    return dict(grouped)
