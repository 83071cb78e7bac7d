"""HTTP surface of the AltiTeam service."""
