"""Runtime layer: retry/backoff, batch scheduling, usage monitoring, logging."""
