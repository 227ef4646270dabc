"""
Catalog Backend: API Routes Package
====================================

Route Inventory:
    - categories.py:  /categories        (multipart, one image: img)
    - products.py:    /products          (multipart, image1..image5)
    - reference.py:   /subCategories, /brands, /variantTypes, /variants (JSON)
    - health.py:      /health

Routes stay thin: pull values out of the request, call a service, wrap the
result in the {success, message, data} envelope. Errors are raised, never
returned; the global handlers in main.py format them.
"""
