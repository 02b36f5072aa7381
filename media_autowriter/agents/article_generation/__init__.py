"""Article generation pipeline, duplicate-theme filter and scheduled trigger."""
