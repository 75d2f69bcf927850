# Routes package init
"""
API Envelope — Sample API Routes
==================================

Route Inventory:
    - health.py:  GET  /health                          (enveloped)
    - users.py:   GET  /api/users/me                    (enveloped, needs UserId)
                  POST /api/users                       (enveloped, may raise 422)
    - files.py:   GET  /api/files/Download/{name}       (bypassed, streamed)

Routes stay unaware of the envelope: they return plain payloads or raise.
"""
