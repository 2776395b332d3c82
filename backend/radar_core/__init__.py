"""Core logic for signal generation, lifecycle tracking, and statistics.

This package contains pure business logic with no I/O dependencies
(no network, file or notification access). Persistence and delivery
are handled by the service layer (radar_app/).
"""
