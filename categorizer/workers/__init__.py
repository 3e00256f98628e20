"""Workers package: job registry, single-worker queue, classification job runner, and tag poller."""
