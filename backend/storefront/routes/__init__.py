# Routes package init
"""
Storefront Backend — API Routes Package
=========================================

Route Inventory:
    - products.py: POST /api/products          (multipart create with images)
                   GET  /api/products          (list, images rendered)
                   GET  /api/products/{id}     (single product)
                   DELETE /api/products/{id}   (not-found-aware delete)
    - orders.py:   POST /api/order             (bracelet order submission)
                   GET  /api/order             (list, newest first)
    - health.py:   GET  /                      (plain-text status)
                   GET  /health                (dependency health)

Routes stay thin: extract input, call the service, return the schema.
"""
