"""HUD telemetry extraction from gameplay screen captures."""
