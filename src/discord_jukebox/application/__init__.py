"""
Application Layer

Contains use cases, command handlers, and application services.
This layer orchestrates domain objects and infrastructure to fulfill use cases.

Structure:
- commands/: write operations (PlayTrackCommand, StopPlaybackCommand)
- services/: the per-guild QueueController
- interfaces/: Port interfaces for infrastructure adapters
"""
