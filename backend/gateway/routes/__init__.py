# Routes package init
"""
Corpdata Gateway - API Routes Package
======================================

What:  HTTP route handlers, one module per resource.

Route Inventory:
    - company.py:    POST /company, GET /companies, PUT /company/{id},
                     PATCH /company, DELETE /company/{id}
    - customers.py:  GET /customers, GET /customer/{id}
    - orders.py:     GET /orders, GET /order, GET /order-amount
    - students.py:   GET /students-report, GET /student/{class}
    - agents.py:     GET /agents
    - foods.py:      GET /company-foods/{id}
    - health.py:     GET /health

Design Principle:
    Handlers are glue. Each one declares its validation rule set, binds the
    validated values into its SQL template, and hands the statement to the
    query service. SQL values are always bound parameters.
"""
