"""HTTP server for the restart orchestrator."""
