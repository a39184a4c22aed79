"""Domain layer: DTOs, enums, collaborator protocols, events and exceptions."""
