"""
NotebookHub Backend — API Routes Package
=========================================

Route Inventory:
    - pdfs.py:    /api/pdfs...        (documents, moderation, counters)
    - auth.py:    POST /api/login     (admin token)
    - files.py:   GET  /uploads/...   (stored PDFs)
    - health.py:  GET  /health        (service health check)

Routes stay thin: extract request data, apply the auth guard, call a
service, shape the response.
"""
