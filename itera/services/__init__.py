"""Planning services: prompts, reconciliation, images and orchestration."""
