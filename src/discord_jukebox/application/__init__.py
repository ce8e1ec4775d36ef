"""
Application Layer

Contains the application services that orchestrate domain objects and
infrastructure adapters to carry out chat commands.

Structure:
- services/: Session store, queue engine, join policy, supervisor and controller
- interfaces/: Port interfaces for infrastructure adapters
"""
