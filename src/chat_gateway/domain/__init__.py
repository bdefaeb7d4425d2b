"""Domain layer — chat payloads, enums and pure services."""
