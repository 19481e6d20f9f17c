# Services package init
"""
SpeciesBoard Backend — Services Layer
=====================================

What:  Query logic sitting between routes (HTTP) and the database.
How:   Stateless service objects receive the request's AsyncSession on every
       call, validate the fields they need, run their SQL and return
       Pydantic response models.

Service Inventory:
    - PlayerService: leaderboard reads, increase-points, change-password, add-player
    - PhotoService:  photo upload, catalog listings, data-URI encoding
"""
