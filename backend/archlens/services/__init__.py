# Services package init
"""
ArchLens Backend - Services Layer
==================================

What:  Data access and business rules between routes (HTTP) and the database.

Service Inventory:
    - AnalysisService: lookup, listing, dashboard aggregates, update, delete
    - BlueprintService: blueprint rating

Services return schemas (or None/False for "not found") and raise
archlens.exceptions types; they never build HTTP responses.
"""
