# Routes package init
"""
SpeciesBoard Backend — API Routes Package
=========================================

Route Inventory:
    - players.py: leaderboard reads, increase-points, change-password, add-player
    - photos.py:  photo upload and catalog listings
    - health.py:  GET /health (service health check)

Routes stay thin: they extract fields from the request, call a service,
and return its response model.
"""
