"""Pure domain services: prompt assembly, reply insights, fallback wording."""
