# Routes package init
"""
ArchLens Backend - API Routes Package
======================================

Route Inventory:
    - analysis.py:   GET    /api/analysis/{id}          (single analysis)
    - analyses.py:   GET    /api/analyses               (filtered, paginated list)
                     GET    /api/analyses/{id}          (single analysis, with error details)
                     PATCH  /api/analyses/{id}          (partial update)
                     DELETE /api/analyses/{id}          (delete analysis)
    - blueprints.py: POST   /api/blueprints/{id}/rate   (rate a blueprint)
    - dashboard.py:  GET    /api/dashboard              (aggregate statistics)
    - projects.py:   DELETE /api/projects/{id}          (delete project = analysis)
    - health.py:     GET    /health                     (service health check)

Routes stay thin: call one service method, turn None/False into NotFoundError,
and wrap anything unexpected in RequestFailedError with the endpoint's own
message. The global handlers in main.py render every error body.
"""
