# Routes package init
"""
Exam Builder Backend — API Routes Package
===========================================

Route Inventory:
    - users.py:   GET    /users            (list users)
                  GET    /users/{id}       (single user)
                  POST   /users            (create)
                  PUT    /users/{id}       (partial update)
                  DELETE /users/{id}       (delete, returns snapshot)
    - health.py:  GET    /health           (service and database status)

Routes stay thin: pull data out of the request, call UserService, wrap the
result in an envelope. Business rules live in app.services.user_service.
"""
