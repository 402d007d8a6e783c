"""Error hierarchy for dcr-wallet."""
