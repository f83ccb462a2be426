"""JSONL telemetry logging and dashboard for the mapping simulator."""
