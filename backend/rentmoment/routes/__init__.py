# Routes package init
"""
Rent The Moment Backend — API Routes Package
===========================================

Route Inventory (all under /api):
    - auth.py:        /auth/register, /auth/login, /auth/me
    - categories.py:  /categories[/{id}]
    - products.py:    /products[/{id}]
    - merchants.py:   /merchants[/{id}]             (admin)
    - orders.py:      /orders, /orders/my, /orders/{id}[/status|/cancel]
    - users.py:       /users[/{id}], /users/profile
    - upload.py:      /upload/image(s), /upload/{path}, /files/{path}
    - health.py:      /health

Routes stay thin: pull values out of the request, call one service, wrap
the result in the `{success, message, data}` envelope.
"""
