"""Self-update engine: integrity checks, update decisions and installers."""
