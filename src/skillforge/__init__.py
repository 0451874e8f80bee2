"""skillforge: derived character values for a tabletop rules engine."""
