"""RedZone Tracker: live fantasy lineups across Sleeper leagues."""

__version__ = "1.0.0"
